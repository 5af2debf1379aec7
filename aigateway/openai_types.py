"""Data types for OpenAI-compatible chat, embedding, image and model APIs.

Each type converts to and from the JSON-ready dictionaries used on the wire.
Fields that the wire format marks as optional are left out of ``to_dict``
output when they hold their empty value.
"""

from __future__ import annotations

import base64
import binascii
import struct
from dataclasses import dataclass, field
from typing import Any, Mapping


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def decode_embedding_vector(value: Any) -> list[float]:
    """Decode an embedding given as a list of numbers or base64 little-endian float32."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        if not all(_is_number(v) for v in value):
            raise ValueError("embedding list must contain only numbers")
        return [float(v) for v in value]
    if isinstance(value, str):
        try:
            raw = base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid base64 embedding: {exc}") from exc
        count = len(raw) // 4
        return list(struct.unpack(f"<{count}f", raw[: count * 4]))
    raise ValueError(f"unsupported embedding value of type {type(value).__name__}")


@dataclass
class Message:
    """A chat message."""

    role: str = ""
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        return cls(role=data.get("role") or "", content=data.get("content") or "")


@dataclass
class Delta:
    """An incremental message fragment in a streaming response."""

    role: str = ""
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.role:
            out["role"] = self.role
        if self.content:
            out["content"] = self.content
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Delta:
        return cls(role=data.get("role") or "", content=data.get("content") or "")


@dataclass
class Choice:
    """One completion choice, full or streamed."""

    index: int = 0
    message: Message = field(default_factory=Message)
    delta: Delta | None = None
    finish_reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"index": self.index, "message": self.message.to_dict()}
        if self.delta is not None:
            out["delta"] = self.delta.to_dict()
        out["finish_reason"] = self.finish_reason
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Choice:
        delta = data.get("delta")
        return cls(
            index=data.get("index") or 0,
            message=Message.from_dict(data.get("message") or {}),
            delta=Delta.from_dict(delta) if delta is not None else None,
            finish_reason=data.get("finish_reason") or "",
        )


@dataclass
class Usage:
    """Token usage counters."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Usage:
        return cls(
            prompt_tokens=data.get("prompt_tokens") or 0,
            completion_tokens=data.get("completion_tokens") or 0,
            total_tokens=data.get("total_tokens") or 0,
        )


@dataclass
class FunctionDefinition:
    """The definition of a callable function tool."""

    name: str = ""
    description: str = ""
    parameters: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.description:
            out["description"] = self.description
        if self.parameters:
            out["parameters"] = self.parameters
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FunctionDefinition:
        params = data.get("parameters")
        return cls(
            name=data.get("name") or "",
            description=data.get("description") or "",
            parameters=dict(params) if params is not None else None,
        )


@dataclass
class Tool:
    """A tool the model may call."""

    type: str = "function"
    function: FunctionDefinition = field(default_factory=FunctionDefinition)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Tool:
        return cls(
            type=data.get("type") or "",
            function=FunctionDefinition.from_dict(data.get("function") or {}),
        )


@dataclass
class ToolCall:
    """A tool call made by the model."""

    type: str = "function"
    name: str = ""
    arguments: str = ""
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        out["type"] = self.type
        out["function"] = {"name": self.name, "arguments": self.arguments}
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolCall:
        function = data.get("function") or {}
        return cls(
            type=data.get("type") or "",
            name=function.get("name") or "",
            arguments=function.get("arguments") or "",
            id=data.get("id") or "",
        )


@dataclass
class ChatCompletionRequest:
    """A chat completion request."""

    model: str = ""
    messages: list[Message] = field(default_factory=list)
    temperature: float | None = None
    top_p: float | None = None
    n: int | None = None
    stream: bool = False
    max_tokens: int | None = None
    stop: Any = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    tools: list[Tool] = field(default_factory=list)
    tool_choice: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }
        optional = {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "n": self.n,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.stream:
            out["stream"] = True
        optional = {
            "max_tokens": self.max_tokens,
            "stop": self.stop,
            "presence_penalty": self.presence_penalty,
            "frequency_penalty": self.frequency_penalty,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.tools:
            out["tools"] = [t.to_dict() for t in self.tools]
        if self.tool_choice is not None:
            out["tool_choice"] = self.tool_choice
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatCompletionRequest:
        return cls(
            model=data.get("model") or "",
            messages=[Message.from_dict(m) for m in data.get("messages") or []],
            temperature=data.get("temperature"),
            top_p=data.get("top_p"),
            n=data.get("n"),
            stream=bool(data.get("stream", False)),
            max_tokens=data.get("max_tokens"),
            stop=data.get("stop"),
            presence_penalty=data.get("presence_penalty"),
            frequency_penalty=data.get("frequency_penalty"),
            tools=[Tool.from_dict(t) for t in data.get("tools") or []],
            tool_choice=data.get("tool_choice"),
        )


@dataclass
class ChatCompletionResponse:
    """A complete chat completion response."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[Choice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [c.to_dict() for c in self.choices],
            "usage": self.usage.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatCompletionResponse:
        return cls(
            id=data.get("id") or "",
            object=data.get("object") or "",
            created=data.get("created") or 0,
            model=data.get("model") or "",
            choices=[Choice.from_dict(c) for c in data.get("choices") or []],
            usage=Usage.from_dict(data.get("usage") or {}),
        )


@dataclass
class ChatCompletionStreamResponse:
    """One chunk of a streamed chat completion."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[Choice] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [c.to_dict() for c in self.choices],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatCompletionStreamResponse:
        return cls(
            id=data.get("id") or "",
            object=data.get("object") or "",
            created=data.get("created") or 0,
            model=data.get("model") or "",
            choices=[Choice.from_dict(c) for c in data.get("choices") or []],
        )


@dataclass
class EmbeddingRequest:
    """An embedding request; input is a string, a list of strings or a list of lists."""

    input: Any = None
    model: str = ""
    encoding_format: str = ""
    dimensions: int = 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"input": self.input, "model": self.model}
        if self.encoding_format:
            out["encoding_format"] = self.encoding_format
        if self.dimensions:
            out["dimensions"] = self.dimensions
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmbeddingRequest:
        return cls(
            input=data.get("input"),
            model=data.get("model") or "",
            encoding_format=data.get("encoding_format") or "",
            dimensions=data.get("dimensions") or 0,
        )


@dataclass
class Embedding:
    """A single embedding vector."""

    object: str = ""
    embedding: list[float] = field(default_factory=list)
    index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"object": self.object, "embedding": list(self.embedding), "index": self.index}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Embedding:
        return cls(
            object=data.get("object") or "",
            embedding=decode_embedding_vector(data.get("embedding")),
            index=data.get("index") or 0,
        )


@dataclass
class EmbeddingResponse:
    """An embedding response."""

    object: str = ""
    data: list[Embedding] = field(default_factory=list)
    model: str = ""
    usage: Usage = field(default_factory=Usage)

    def to_dict(self) -> dict[str, Any]:
        return {
            "object": self.object,
            "data": [e.to_dict() for e in self.data],
            "model": self.model,
            "usage": self.usage.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmbeddingResponse:
        return cls(
            object=data.get("object") or "",
            data=[Embedding.from_dict(e) for e in data.get("data") or []],
            model=data.get("model") or "",
            usage=Usage.from_dict(data.get("usage") or {}),
        )


@dataclass
class ImageRequest:
    """An image generation request."""

    prompt: str = ""
    model: str = ""
    n: int = 0
    size: str = ""
    quality: str = ""
    style: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.model:
            out["model"] = self.model
        out["prompt"] = self.prompt
        if self.n:
            out["n"] = self.n
        for key in ("size", "quality", "style"):
            value = getattr(self, key)
            if value:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ImageRequest:
        return cls(
            prompt=data.get("prompt") or "",
            model=data.get("model") or "",
            n=data.get("n") or 0,
            size=data.get("size") or "",
            quality=data.get("quality") or "",
            style=data.get("style") or "",
        )


@dataclass
class Image:
    """A generated image, as a URL or base64 data."""

    url: str = ""
    b64_json: str = ""
    revised_prompt: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("url", self.url),
                ("b64_json", self.b64_json),
                ("revised_prompt", self.revised_prompt),
            )
            if value
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Image:
        return cls(
            url=data.get("url") or "",
            b64_json=data.get("b64_json") or "",
            revised_prompt=data.get("revised_prompt") or "",
        )


@dataclass
class ImageResponse:
    """An image generation response."""

    created: int = 0
    data: list[Image] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"created": self.created, "data": [i.to_dict() for i in self.data]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ImageResponse:
        return cls(
            created=data.get("created") or 0,
            data=[Image.from_dict(i) for i in data.get("data") or []],
        )


@dataclass
class Model:
    """A model available from a provider."""

    id: str = ""
    object: str = ""
    created: int = 0
    owned_by: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "owned_by": self.owned_by,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Model:
        return cls(
            id=data.get("id") or "",
            object=data.get("object") or "",
            created=data.get("created") or 0,
            owned_by=data.get("owned_by") or "",
        )


@dataclass
class ModelsResponse:
    """The response to a model listing."""

    object: str = ""
    data: list[Model] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"object": self.object, "data": [m.to_dict() for m in self.data]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ModelsResponse:
        return cls(
            object=data.get("object") or "",
            data=[Model.from_dict(m) for m in data.get("data") or []],
        )