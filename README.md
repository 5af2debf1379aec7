# aigateway

A small library for talking to large-language-model providers through one
request and response shape. It speaks the OpenAI wire format (chat
completions, embeddings, image generation, and streaming over server-sent
events), can turn Responses-style requests into Chat Completions requests,
and includes a Gemini HTTP provider, per-tenant token quotas and a
token-bucket rate limiter.

## Installation

```
pip install aigateway
```

To run the test suite:

```
pip install "aigateway[test]"
pytest
```

## Modules

- `aigateway.openai_types`: dataclasses for the OpenAI wire format, each
  with `to_dict` and `from_dict`. It also has `decode_embedding_vector`.
- `aigateway.sse`: `parse_sse_line`, `is_done_marker`, `extract_data` and
  `StreamChunk`.
- `aigateway.gemini`: Gemini request and response types, and the converters
  `openai_to_gemini`, `gemini_to_openai`, `embeddings_openai_to_gemini` and
  `embeddings_gemini_to_openai`.
- `aigateway.config`: the `APIType` flag set and `ProviderConfig`.
- `aigateway.request`: the unified `Request` and its constructors.
- `aigateway.response`: the unified `Response`, `Chunk` and `ChunkType`.
- `aigateway.converter`: `Converter`, which rewrites requests between the
  Chat Completions and Responses styles.
- `aigateway.provider`: `BaseProvider`, `HTTPProvider`, the `Provider`
  interface and `ProviderError`.
- `aigateway.gemini_http`: `GeminiHTTPProvider`.
- `aigateway.retry`, `aigateway.quota`, `aigateway.ratelimit`.

## Sending a chat request

```python
from aigateway.openai_types import Message
from aigateway.provider import http_provider_with_base_url
from aigateway.request import chat_completions_request

provider = http_provider_with_base_url("https://llm.example.com", "placeholder")
req = chat_completions_request("gpt-4", [Message(role="user", content="Hello")])

resp = provider.send_request(req)
print(resp.expect_chat_completion().choices[0].message.content)
```

The API key is sent as `Authorization: Bearer <key>`. Any entries in
`req.headers` are added to the request. A non-200 reply, a failed
connection or an unreadable body raises `ProviderError`; for status errors
its `status_code` is set.

If `req.endpoint` is empty, the endpoint is chosen from `req.api_type`:
`/v1/chat/completions`, `/v1/responses`, `/v1/embeddings` or
`/v1/images/generations`.

Other constructors:

- `http_provider_with_base_url_and_path(base_url, api_key, base_path)`
  strips `base_path` from the front of each endpoint before joining it to
  the base URL.
- `http_provider_chat_only(base_url, api_key)` supports only
  `APIType.CHAT_COMPLETIONS`. A Responses-style request sent to it has its
  `input` turned into chat messages first.
- `http_provider_full(name, base_url, api_key, supported_apis)` takes a name
  and a set of `APIType` flags.
- `HTTPProvider(config)` takes a `ProviderConfig` directly.

## Streaming

Set `req.stream = True` to get a streaming response. Iterating it yields
`Chunk` objects. Each data line becomes a chunk whose `openai.data` holds
the raw JSON bytes, and `data: [DONE]` yields a final chunk with `done`
set. A read error during the stream raises `ProviderError`. The response
is a context manager that closes the connection on exit:

```python
req.stream = True
with provider.send_request(req) as resp:
    for chunk in resp:
        if chunk.done:
            break
        print(chunk.openai.data.decode())
```

## Embeddings and images

```python
from aigateway.request import embeddings_request, images_request

emb = provider.send_request(embeddings_request("text-embedding-3-small", "hello world"))
print(len(emb.expect_embedding().data[0].embedding))

img = provider.send_request(images_request("dall-e-3", "a cat"))
print(img.expect_image().data[0].url)
```

Embedding vectors come back as lists of floats. The provider may send them
as a JSON array or as base64-encoded little-endian float32 values.

## Gemini

```python
from aigateway.gemini_http import GeminiHTTPProvider
from aigateway.openai_types import ChatCompletionRequest, Message

gemini = GeminiHTTPProvider("placeholder")
result = gemini.send_request(
    "/v1/chat/completions",
    ChatCompletionRequest(model="gemini-pro", messages=[Message(role="user", content="Hi")]),
)
```

When converting the request, the `assistant` role becomes `model` and
`system` becomes `user`. The model defaults to `gemini-pro`. Requests for
`/v1/images/generations` and `/v1/embeddings` raise `ProviderError`.

## Quotas and rate limiting

```python
from aigateway.quota import MemoryQuotaManager, QuotaConfig, ResetPeriod
from aigateway.ratelimit import RateLimitConfig, TokenBucket

with MemoryQuotaManager(
    QuotaConfig(default_quota=1000, reset_period=ResetPeriod.NEVER, enabled=True)
) as quotas:
    quotas.record_usage("tenant1", 100, 50, 150)
    allowed, usage = quotas.check_quota("tenant1")

limiter = TokenBucket(RateLimitConfig(requests_per_second=10, burst=20, enabled=True))
if limiter.allow("user1"):
    ...
```

About quotas:

- A quota limit of 0 means unlimited.
- When quotas are disabled, `record_usage` does nothing and `check_quota`
  returns `(True, None)`.
- Unless the reset period is `NEVER`, a background thread clears expired
  usage. `close()` stops that thread.

## Retries

`RetryConfig` and `retry_with_backoff(config, fn)` in `aigateway.retry`
call `fn` again when it returns a response whose `status_code` is 408, 429,
500, 502, 503 or 504, or when it raises. Between attempts they wait with
exponential backoff and optional jitter.

## What it does not do

- There is no server or command-line program. This is a client library
  only.
- Quotas and rate-limit buckets are held in memory and are not stored
  anywhere.
- `ResetPeriod.WEEKLY` resets a day ahead, not a week ahead.
- The providers do not apply `ProviderConfig.retry_config` by themselves.
  Use `retry_with_backoff` around your own calls.
- Responses from upstream are not converted into the Responses format.
- The Gemini provider handles only non-streaming chat.