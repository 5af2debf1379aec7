"""In-memory tracking and enforcement of per-tenant token quotas."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone


class ResetPeriod(enum.Enum):
    """How often quotas reset."""

    HOURLY = 0
    DAILY = 1
    WEEKLY = 2
    MONTHLY = 3
    NEVER = 4


@dataclass
class Usage:
    """Token usage for one tenant. A quota limit of 0 means unlimited."""

    tenant_id: str
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    quota_limit: int = 0
    reset_at: datetime | None = None
    last_updated: datetime | None = None

    def _clear(self, reset_at: datetime | None, now: datetime | None) -> None:
        self.input_tokens = 0
        self.output_tokens = 0
        self.total_tokens = 0
        self.reset_at = reset_at
        if now is not None:
            self.last_updated = now


@dataclass
class QuotaConfig:
    """Quota manager settings. A default quota of 0 means unlimited."""

    default_quota: int = 0
    reset_period: ResetPeriod = ResetPeriod.DAILY
    enabled: bool = False


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _expired(reset_at: datetime | None, now: datetime) -> bool:
    # An unset reset time lies at the beginning of time, so it has always passed.
    return reset_at is None or now > reset_at


class MemoryQuotaManager:
    """Keeps tenant usage in memory and resets it periodically.

    Unless the reset period is ``NEVER``, a background thread resets expired
    usage; call ``close`` (or use the manager as a context manager) to stop it.
    """

    def __init__(self, config: QuotaConfig | None = None) -> None:
        self.config = config if config is not None else QuotaConfig()
        self._lock = threading.Lock()
        self._usages: dict[str, Usage] = {}
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        if self.config.reset_period != ResetPeriod.NEVER:
            self._thread = threading.Thread(target=self._run_auto_reset, daemon=True)
            self._thread.start()

    def __enter__(self) -> MemoryQuotaManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def record_usage(
        self, tenant_id: str, input_tokens: int, output_tokens: int, total_tokens: int
    ) -> None:
        """Add token usage for a tenant; does nothing when quotas are disabled."""
        if not self.config.enabled:
            return
        with self._lock:
            usage = self._usages.get(tenant_id)
            if usage is None:
                usage = Usage(
                    tenant_id=tenant_id,
                    quota_limit=self.config.default_quota,
                    reset_at=self._calculate_reset_time(),
                )
                self._usages[tenant_id] = usage
            if _expired(usage.reset_at, _now()):
                usage._clear(self._calculate_reset_time(), None)
            usage.input_tokens += input_tokens
            usage.output_tokens += output_tokens
            usage.total_tokens += total_tokens
            usage.last_updated = _now()

    def check_quota(self, tenant_id: str) -> tuple[bool, Usage | None]:
        """Return whether the tenant still has quota, and its usage.

        When quotas are disabled the answer is always ``(True, None)``.
        """
        if not self.config.enabled:
            return True, None
        with self._lock:
            usage = self._usages.get(tenant_id)
            if usage is None:
                return True, Usage(tenant_id=tenant_id, quota_limit=self.config.default_quota)
            snapshot = replace(usage)
        if snapshot.reset_at is not None and _now() > snapshot.reset_at:
            return True, snapshot
        if snapshot.quota_limit == 0:
            return True, snapshot
        return snapshot.total_tokens < snapshot.quota_limit, snapshot

    def get_usage(self, tenant_id: str) -> Usage:
        """Return a copy of the tenant's current usage."""
        with self._lock:
            usage = self._usages.get(tenant_id)
            if usage is None:
                return Usage(
                    tenant_id=tenant_id,
                    quota_limit=self.config.default_quota,
                    reset_at=self._calculate_reset_time(),
                )
            return replace(usage)

    def set_quota(self, tenant_id: str, limit: int) -> None:
        """Set the tenant's quota limit."""
        with self._lock:
            usage = self._usages.get(tenant_id)
            if usage is None:
                self._usages[tenant_id] = Usage(
                    tenant_id=tenant_id,
                    quota_limit=limit,
                    reset_at=self._calculate_reset_time(),
                )
            else:
                usage.quota_limit = limit

    def reset_usage(self, tenant_id: str) -> None:
        """Clear the tenant's usage counters."""
        with self._lock:
            usage = self._usages.get(tenant_id)
            if usage is not None:
                usage._clear(self._calculate_reset_time(), _now())

    def reset_all(self) -> None:
        """Clear usage counters for every tenant."""
        with self._lock:
            reset_at = self._calculate_reset_time()
            now = _now()
            for usage in self._usages.values():
                usage._clear(reset_at, now)

    def close(self) -> None:
        """Stop the background reset thread."""
        self._stop.set()

    def _calculate_reset_time(self) -> datetime | None:
        now = _now()
        period = self.config.reset_period
        if period == ResetPeriod.HOURLY:
            return (now + timedelta(hours=1)).replace(minute=0, second=0, microsecond=0)
        if period == ResetPeriod.DAILY:
            return (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
        if period == ResetPeriod.MONTHLY:
            year, month = (now.year + 1, 1) if now.month == 12 else (now.year, now.month + 1)
            return datetime(year, month, 1, tzinfo=now.tzinfo)
        if period == ResetPeriod.NEVER:
            return None
        return now + timedelta(days=1)

    def _run_auto_reset(self) -> None:
        interval = 3600.0 if self.config.reset_period == ResetPeriod.HOURLY else 86400.0
        while not self._stop.wait(interval):
            self._check_and_reset_expired()

    def _check_and_reset_expired(self) -> None:
        with self._lock:
            now = _now()
            reset_at = self._calculate_reset_time()
            for usage in self._usages.values():
                if _expired(usage.reset_at, now):
                    usage._clear(reset_at, now)