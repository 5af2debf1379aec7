"""A provider that sends chat requests to the Gemini HTTP API."""

from __future__ import annotations

import json

import httpx

from aigateway.gemini import GenerateContentResponse, gemini_to_openai, openai_to_gemini
from aigateway.openai_types import ChatCompletionRequest, ChatCompletionResponse
from aigateway.provider import ProviderError

_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
_DEFAULT_MODEL = "gemini-pro"
_IMAGES_ENDPOINT = "/v1/images/generations"
_EMBEDDINGS_ENDPOINT = "/v1/embeddings"


class GeminiHTTPProvider:
    """Sends OpenAI-style chat requests to Gemini and converts the replies back."""

    def __init__(self, api_key: str) -> None:
        self.base_url = _DEFAULT_BASE_URL
        self.api_key = api_key
        self.client = httpx.Client(timeout=60.0)

    def name(self) -> str:
        return "gemini-http"

    def send_request(self, endpoint: str, req: ChatCompletionRequest) -> ChatCompletionResponse:
        """Send a non-streaming request for ``endpoint``.

        Raises ``ProviderError`` for unsupported endpoints and failed calls.
        """
        if endpoint == _IMAGES_ENDPOINT:
            raise ProviderError("image generation not supported for Gemini provider")
        if endpoint == _EMBEDDINGS_ENDPOINT:
            raise ProviderError("embeddings endpoint requires separate EmbeddingRequest type")
        return self._send_chat(req)

    def _send_chat(self, req: ChatCompletionRequest) -> ChatCompletionResponse:
        model = req.model or _DEFAULT_MODEL
        payload = openai_to_gemini(req, model).to_dict()
        try:
            body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ProviderError(f"marshal request: {exc}") from exc

        url = f"{self.base_url}/models/{model}:generateContent?key={self.api_key}"
        try:
            response = self.client.post(
                url, content=body, headers={"Content-Type": "application/json"}
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"send request: {exc}") from exc

        if response.status_code != 200:
            raise ProviderError(
                f"unexpected status {response.status_code}: {response.text}",
                response.status_code,
            )

        try:
            data = json.loads(response.content)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            gemini_resp = GenerateContentResponse.from_dict(data)
        except (ValueError, TypeError, AttributeError) as exc:
            raise ProviderError(f"decode response: {exc}") from exc

        return gemini_to_openai(gemini_resp, model)