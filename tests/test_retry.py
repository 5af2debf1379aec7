import pytest

from aigateway.retry import RetryConfig, default_retry_config, retry_with_backoff


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code
        self.closed = False

    def close(self):
        self.closed = True


def make_fn(outcomes):
    calls = []

    def fn():
        outcome = outcomes[min(len(calls), len(outcomes) - 1)]
        calls.append(outcome)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return fn, calls


def fast_config(**kwargs):
    kwargs.setdefault("initial_backoff", 0.0)
    kwargs.setdefault("jitter", False)
    return RetryConfig(**kwargs)


def test_default_config_values():
    cfg = default_retry_config()
    assert cfg.max_retries == 3
    assert cfg.initial_backoff == pytest.approx(0.1)
    assert cfg.max_backoff == pytest.approx(10.0)
    assert cfg.backoff_multiplier == pytest.approx(2.0)
    assert cfg.jitter is True
    assert cfg.enabled is True
    assert cfg.retryable_status_codes == {408, 429, 500, 502, 503, 504}


@pytest.mark.parametrize("code", [408, 429, 500, 502, 503, 504])
def test_retryable_codes(code):
    assert default_retry_config().should_retry(code) is True


@pytest.mark.parametrize("code", [200, 400, 401, 404])
def test_non_retryable_codes(code):
    assert default_retry_config().should_retry(code) is False


def test_disabled_never_retries():
    assert RetryConfig(enabled=False).should_retry(503) is False


def test_backoff_first_attempt_is_initial():
    cfg = RetryConfig(initial_backoff=0.1, jitter=False)
    assert cfg.backoff_duration(0) == pytest.approx(0.1)


def test_backoff_grows_and_is_capped():
    cfg = RetryConfig(jitter=False)
    durations = [cfg.backoff_duration(a) for a in range(20)]
    assert durations == sorted(durations)
    assert durations[-1] == pytest.approx(cfg.max_backoff)
    assert all(d <= cfg.max_backoff for d in durations)


def test_backoff_jitter_bounds():
    plain = RetryConfig(jitter=False)
    jittered = RetryConfig(jitter=True)
    for attempt in range(6):
        base = plain.backoff_duration(attempt)
        for _ in range(20):
            value = jittered.backoff_duration(attempt)
            assert base <= value <= base * 1.25 + 1e-12


def test_success_first_try():
    ok = FakeResponse(200)
    fn, calls = make_fn([ok])
    assert retry_with_backoff(fast_config(), fn) is ok
    assert len(calls) == 1


def test_retry_then_success_closes_failed_response():
    bad, ok = FakeResponse(503), FakeResponse(200)
    fn, calls = make_fn([bad, ok])
    assert retry_with_backoff(fast_config(), fn) is ok
    assert len(calls) == 2
    assert bad.closed is True
    assert ok.closed is False


def test_non_retryable_status_returned_immediately():
    bad = FakeResponse(400)
    fn, calls = make_fn([bad])
    assert retry_with_backoff(fast_config(), fn) is bad
    assert len(calls) == 1


def test_exhausted_retries_return_last_response():
    cfg = fast_config(max_retries=2)
    responses = [FakeResponse(503) for _ in range(cfg.max_retries + 1)]
    fn, calls = make_fn(responses)
    result = retry_with_backoff(cfg, fn)
    assert result is responses[-1]
    assert len(calls) == cfg.max_retries + 1


def test_exception_then_success():
    ok = FakeResponse(200)
    fn, calls = make_fn([ConnectionError("boom"), ok])
    assert retry_with_backoff(fast_config(), fn) is ok
    assert len(calls) == 2


def test_exception_on_every_attempt_raises():
    cfg = fast_config(max_retries=2)
    fn, calls = make_fn([ConnectionError("boom")])
    with pytest.raises(ConnectionError, match="boom"):
        retry_with_backoff(cfg, fn)
    assert len(calls) == cfg.max_retries + 1


def test_disabled_calls_once_and_propagates():
    fn, calls = make_fn([ConnectionError("boom")])
    with pytest.raises(ConnectionError):
        retry_with_backoff(fast_config(enabled=False), fn)
    assert len(calls) == 1


def test_none_config_calls_once():
    bad = FakeResponse(503)
    fn, calls = make_fn([bad])
    assert retry_with_backoff(None, fn) is bad
    assert len(calls) == 1