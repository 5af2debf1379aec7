"""A unified request covering chat completions, responses, embeddings and images."""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping

from aigateway.config import APIType
from aigateway.openai_types import (
    ChatCompletionRequest,
    EmbeddingRequest,
    ImageRequest,
    Message,
    Tool,
)

_JSON_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


@dataclass
class Request:
    """A request in any of the supported API formats.

    Only the fields that belong to ``api_type`` are used when the request
    is sent; the common sampling parameters apply to chat and responses.
    """

    api_type: APIType = APIType.CHAT_COMPLETIONS
    stream: bool = False
    model: str = ""
    endpoint: str = ""

    # Chat completions
    messages: list[Message] = field(default_factory=list)

    # Responses
    input: Any = None
    previous_response_id: str = ""
    truncation: str = ""

    # Embeddings
    embedding_input: Any = None
    encoding_format: str = ""
    dimensions: int = 0

    # Images
    image_prompt: str = ""
    image_n: int = 0
    image_size: str = ""
    image_quality: str = ""
    image_style: str = ""

    # Common parameters
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    max_output_tokens: int | None = None
    stop: Any = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    tools: list[Tool] = field(default_factory=list)
    tool_choice: Any = None

    original_body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    def effective_max_tokens(self) -> int | None:
        """Return ``max_output_tokens`` if set, else ``max_tokens``."""
        if self.max_output_tokens is not None:
            return self.max_output_tokens
        return self.max_tokens

    def set_max_tokens(self, max_tokens: int | None) -> None:
        """Set the token limit under both of its names."""
        self.max_tokens = max_tokens
        self.max_output_tokens = max_tokens

    def to_chat_completion_request(self) -> ChatCompletionRequest:
        """Build the chat completion request for this request."""
        return ChatCompletionRequest(
            model=self.model,
            messages=list(self.messages),
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.effective_max_tokens(),
            stop=self.stop,
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
            tools=list(self.tools),
            tool_choice=self.tool_choice,
            stream=self.stream,
        )

    def to_embedding_request(self) -> EmbeddingRequest:
        """Build the embedding request for this request."""
        return EmbeddingRequest(
            input=self.embedding_input,
            model=self.model,
            encoding_format=self.encoding_format,
            dimensions=self.dimensions,
        )

    def to_image_request(self) -> ImageRequest:
        """Build the image generation request for this request."""
        return ImageRequest(
            model=self.model,
            prompt=self.image_prompt,
            n=self.image_n,
            size=self.image_size,
            quality=self.image_quality,
            style=self.image_style,
        )

    def clone(self) -> Request:
        """Return a deep copy of the request."""
        return copy.deepcopy(self)

    def input_to_messages(self) -> list[Message]:
        """Turn the responses-style ``input`` into chat messages.

        A string becomes one user message; a list (or JSON array bytes) is
        read as message items; anything else is serialised to JSON and sent
        as a single user message. Raises ``ValueError`` for bytes that are
        not a JSON array and for input that cannot be serialised.
        """
        value = self.input
        if isinstance(value, str):
            return [Message(role="user", content=value)]
        if isinstance(value, list):
            return _messages_from_items(value)
        if isinstance(value, (bytes, bytearray)):
            parsed = json.loads(bytes(value), parse_int=float)
            if parsed is None:
                return _messages_from_items([])
            if not isinstance(parsed, list):
                raise ValueError("input is not a JSON array")
            return _messages_from_items(parsed)

        text = _marshal(value)
        parsed = json.loads(text, parse_int=float)
        if parsed is None or isinstance(parsed, list):
            return _messages_from_items(parsed or [])
        return [Message(role="user", content=text)]


def _marshal(value: Any) -> str:
    try:
        text = json.dumps(
            value,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"cannot encode input: {exc}") from exc
    for raw, escaped in _JSON_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def _messages_from_items(items: Iterable[Any]) -> list[Message]:
    messages = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        role = item.get("role")
        if item.get("type") == "message" and isinstance(role, str) and role:
            content = _value_text(item["content"]) if "content" in item else ""
            messages.append(Message(role=role, content=content))
    return messages or [Message(role="user", content="")]


def _float_text(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    if number == 0:
        return "-0" if math.copysign(1.0, number) < 0 else "0"
    decimal = Decimal(repr(number)).normalize()
    sign, digits, exponent = decimal.as_tuple()
    text_digits = "".join(str(d) for d in digits)
    sci_exponent = exponent + len(text_digits) - 1
    if sci_exponent < -4 or sci_exponent >= 6:
        mantissa = text_digits[0]
        if len(text_digits) > 1:
            mantissa += "." + text_digits[1:]
        exp_sign = "+" if sci_exponent >= 0 else "-"
        return f"{'-' if sign else ''}{mantissa}e{exp_sign}{abs(sci_exponent):02d}"
    return format(decimal, "f")


def _value_text(value: Any) -> str:
    """Render a decoded JSON value the way a default value formatter prints it."""
    if isinstance(value, str):
        return value
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_text(value)
    if isinstance(value, Mapping):
        pairs = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{_value_text(k)}:{_value_text(v)}" for k, v in pairs) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_value_text(v) for v in value) + "]"
    return str(value)


def chat_completions_request(model: str, messages: list[Message]) -> Request:
    """Return a chat completions request."""
    return Request(
        api_type=APIType.CHAT_COMPLETIONS,
        model=model,
        messages=list(messages),
        endpoint="/v1/chat/completions",
    )


def responses_request(model: str, input: Any) -> Request:
    """Return a responses request."""
    return Request(
        api_type=APIType.RESPONSES,
        model=model,
        input=input,
        endpoint="/v1/responses",
    )


def embeddings_request(model: str, input: Any) -> Request:
    """Return an embeddings request."""
    return Request(
        api_type=APIType.EMBEDDINGS,
        model=model,
        embedding_input=input,
        endpoint="/v1/embeddings",
    )


def images_request(model: str, prompt: str) -> Request:
    """Return an image generation request."""
    return Request(
        api_type=APIType.IMAGES,
        model=model,
        image_prompt=prompt,
        endpoint="/v1/images/generations",
    )