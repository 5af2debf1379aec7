"""Providers that send unified requests to OpenAI-compatible HTTP APIs."""

from __future__ import annotations

import abc
import json
import logging
from typing import Any, Callable, Iterable, Iterator, Mapping

import httpx

from aigateway.config import APIType, ProviderConfig, default_config, new_provider_config
from aigateway.converter import Converter
from aigateway.openai_types import ChatCompletionResponse, EmbeddingResponse, ImageResponse
from aigateway.request import Request
from aigateway.response import (
    Chunk,
    Response,
    chat_completion_response,
    embedding_response,
    image_response,
    openai_chunk,
    openai_chunk_done,
    streaming_response,
)
from aigateway.sse import is_done_marker, parse_sse_line

logger = logging.getLogger(__name__)

_CHAT_ENDPOINT = "/v1/chat/completions"
_DEFAULT_ENDPOINTS = {
    APIType.EMBEDDINGS: "/v1/embeddings",
    APIType.IMAGES: "/v1/images/generations",
    APIType.RESPONSES: "/v1/responses",
}


class ProviderError(Exception):
    """A request to an upstream provider failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class Provider(abc.ABC):
    """The interface every LLM provider offers."""

    @abc.abstractmethod
    def name(self) -> str:
        """Return the provider name."""

    @abc.abstractmethod
    def supported_apis(self) -> APIType:
        """Return the API formats the provider accepts."""

    @abc.abstractmethod
    def send_request(self, req: Request) -> Response:
        """Send ``req``; the response streams if ``req.stream`` is set."""


def _encode(payload: Mapping[str, Any]) -> bytes:
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise ProviderError(f"marshal request: {exc}") from exc


def _decode(body: bytes, factory: Callable[[Mapping[str, Any]], Any]) -> Any:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ProviderError(f"decode response: {exc}") from exc
    if not isinstance(data, dict):
        raise ProviderError("decode response: expected a JSON object")
    try:
        return factory(data)
    except (ValueError, TypeError, AttributeError) as exc:
        raise ProviderError(f"decode response: {exc}") from exc


def _split_lines(blocks: Iterable[bytes]) -> Iterator[bytes]:
    """Yield newline-terminated lines; a final unterminated fragment is dropped."""
    buffer = b""
    for block in blocks:
        buffer += block
        while True:
            end = buffer.find(b"\n")
            if end < 0:
                break
            line, buffer = buffer[: end + 1], buffer[end + 1 :]
            yield line


def _stream_chunks(response: httpx.Response) -> Iterator[Chunk]:
    try:
        for line in _split_lines(response.iter_bytes()):
            if is_done_marker(line):
                yield openai_chunk_done()
                return
            _, data, done = parse_sse_line(line)
            if done:
                yield openai_chunk_done()
                return
            if data:
                yield openai_chunk(data)
    except httpx.HTTPError as exc:
        raise ProviderError(f"read stream: {exc}") from exc
    finally:
        response.close()


class BaseProvider(Provider):
    """A provider that speaks the OpenAI HTTP API."""

    def __init__(self, config: ProviderConfig | None = None) -> None:
        if config is None:
            config = default_config()
        self.config = config
        self.client = config.create_client()
        self.converter = Converter(config.supported_apis)

    def name(self) -> str:
        return self.config.name or "base"

    def supported_apis(self) -> APIType:
        return self.config.supported_apis

    def convert_request_if_needed(self, req: Request) -> None:
        """Rewrite ``req`` into a supported format, using the custom converter if set."""
        if self.config.request_converter is not None:
            self.config.request_converter(req)
        else:
            self.converter.convert_request(req)

    def send_request(self, req: Request) -> Response:
        return self.send_openai_request(req)

    def send_openai_request(self, req: Request) -> Response:
        """Send ``req`` to the OpenAI-compatible endpoint that matches its API type."""
        endpoint = req.endpoint or _DEFAULT_ENDPOINTS.get(req.api_type, _CHAT_ENDPOINT)
        url = self.config.base_url + self._strip_base_path(endpoint)
        headers = dict(req.headers or {})

        if req.api_type == APIType.EMBEDDINGS:
            return self._send_embedding(url, req, headers)
        if req.api_type == APIType.IMAGES:
            return self._send_image(url, req, headers)
        return self._send_chat(url, req, headers)

    def _strip_base_path(self, endpoint: str) -> str:
        base_path = self.config.base_path
        if base_path and endpoint.startswith(base_path):
            endpoint = endpoint[len(base_path) :]
            if endpoint and not endpoint.startswith("/"):
                endpoint = "/" + endpoint
        return endpoint

    def _headers(self, extra: Mapping[str, str], accept: str | None = None) -> httpx.Headers:
        headers = httpx.Headers({"Content-Type": "application/json"})
        if self.config.api_key:
            headers["Authorization"] = "Bearer " + self.config.api_key
        if accept is not None:
            headers["Accept"] = accept
        for key, value in extra.items():
            headers[key] = value
        return headers

    def _post(self, url: str, body: bytes, headers: Mapping[str, str]) -> bytes:
        try:
            response = self.client.post(url, content=body, headers=self._headers(headers))
        except httpx.HTTPError as exc:
            raise ProviderError(f"send request: {exc}") from exc
        if response.status_code != 200:
            raise ProviderError(
                f"unexpected status {response.status_code}: {response.text}",
                response.status_code,
            )
        return response.content

    def _send_chat(self, url: str, req: Request, headers: dict[str, str]) -> Response:
        if req.api_type != APIType.CHAT_COMPLETIONS:
            try:
                self.convert_request_if_needed(req)
            except ValueError as exc:
                raise ProviderError(f"convert request: {exc}") from exc

        body = _encode(req.to_chat_completion_request().to_dict())
        if req.stream:
            return self._send_streaming(url, body, headers, req.api_type)

        chat = _decode(self._post(url, body, headers), ChatCompletionResponse.from_dict)
        return chat_completion_response(chat)

    def _send_embedding(self, url: str, req: Request, headers: dict[str, str]) -> Response:
        embedding_req = req.to_embedding_request()
        body = _encode(embedding_req.to_dict())
        logger.info(
            "Sending embedding request to upstream url=%s model=%s body=%s",
            url,
            embedding_req.model,
            body.decode("utf-8"),
        )
        try:
            raw = self._post(url, body, headers)
        except ProviderError as exc:
            logger.error("Upstream embedding request failed url=%s error=%s", url, exc)
            raise
        try:
            result = _decode(raw, EmbeddingResponse.from_dict)
        except ProviderError as exc:
            logger.error(
                "Failed to decode embedding response response=%s error=%s",
                raw.decode("utf-8", errors="replace"),
                exc,
            )
            raise
        return embedding_response(result)

    def _send_image(self, url: str, req: Request, headers: dict[str, str]) -> Response:
        body = _encode(req.to_image_request().to_dict())
        result = _decode(self._post(url, body, headers), ImageResponse.from_dict)
        return image_response(result)

    def _send_streaming(
        self, url: str, body: bytes, headers: Mapping[str, str], api_type: APIType
    ) -> Response:
        request = self.client.build_request(
            "POST",
            url,
            content=body,
            headers=self._headers(headers, accept="text/event-stream"),
        )
        try:
            response = self.client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise ProviderError(f"send request: {exc}") from exc

        if response.status_code != 200:
            try:
                text = response.read().decode("utf-8", errors="replace")
            except httpx.HTTPError:
                text = ""
            finally:
                response.close()
            raise ProviderError(
                f"unexpected status {response.status_code}: {text}", response.status_code
            )

        return streaming_response(api_type, _stream_chunks(response), response.close)


class HTTPProvider(BaseProvider):
    """A configurable provider for chat, responses, embeddings and images over HTTP."""

    def __init__(self, config: ProviderConfig | None = None) -> None:
        if config is None:
            config = default_config()
        if not config.name:
            config.name = "http"
        super().__init__(config)

    def name(self) -> str:
        return self.config.name

    def send_request(self, req: Request) -> Response:
        if not self.supported_apis().supports(req.api_type):
            try:
                self.convert_request_if_needed(req)
            except ValueError as exc:
                raise ProviderError(
                    f"API type {req.api_type} not supported by provider {self.name()}: {exc}"
                ) from exc
        return self.send_openai_request(req)


def _configured(
    name: str, base_url: str, api_key: str, supported_apis: APIType, base_path: str = ""
) -> HTTPProvider:
    config = new_provider_config(name)
    config.base_url = base_url
    config.base_path = base_path
    config.api_key = api_key
    config.supported_apis = supported_apis
    return HTTPProvider(config)


def http_provider_with_base_url(base_url: str, api_key: str) -> HTTPProvider:
    """Return a provider for all API types at ``base_url``."""
    return _configured("http", base_url, api_key, APIType.ALL)


def http_provider_with_base_url_and_path(
    base_url: str, api_key: str, base_path: str
) -> HTTPProvider:
    """Return a provider for all API types that strips ``base_path`` from endpoints."""
    return _configured("http", base_url, api_key, APIType.ALL, base_path)


def http_provider_chat_only(base_url: str, api_key: str) -> HTTPProvider:
    """Return a provider restricted to the chat completions API."""
    return _configured("http", base_url, api_key, APIType.CHAT_COMPLETIONS)


def http_provider_full(
    name: str, base_url: str, api_key: str, supported_apis: APIType
) -> HTTPProvider:
    """Return a provider with the given name and supported API types."""
    return _configured(name, base_url, api_key, supported_apis)