"""Gemini request and response types and conversion to and from OpenAI formats."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from aigateway import openai_types as openai


@dataclass
class InlineData:
    """Inline binary data, such as a base64 encoded image."""

    mime_type: str = ""
    data: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"mimeType": self.mime_type, "data": self.data}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InlineData:
        return cls(mime_type=data.get("mimeType") or "", data=data.get("data") or "")


@dataclass
class Part:
    """One part of a content item."""

    text: str = ""
    function_call: dict[str, Any] | None = None
    inline_data: InlineData | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.text:
            out["text"] = self.text
        if self.function_call:
            out["functionCall"] = self.function_call
        if self.inline_data is not None:
            out["inlineData"] = self.inline_data.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Part:
        inline = data.get("inlineData")
        call = data.get("functionCall")
        return cls(
            text=data.get("text") or "",
            function_call=dict(call) if call is not None else None,
            inline_data=InlineData.from_dict(inline) if inline is not None else None,
        )


@dataclass
class Content:
    """A content item with a role ("user", "model" or "function") and parts."""

    role: str = ""
    parts: list[Part] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.role:
            out["role"] = self.role
        out["parts"] = [p.to_dict() for p in self.parts]
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Content:
        return cls(
            role=data.get("role") or "",
            parts=[Part.from_dict(p) for p in data.get("parts") or []],
        )


@dataclass
class FunctionDeclaration:
    """A function the model may call."""

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


@dataclass
class Tool:
    """A set of function declarations."""

    function_declarations: list[FunctionDeclaration] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.function_declarations:
            return {}
        return {"functionDeclarations": [f.to_dict() for f in self.function_declarations]}


@dataclass
class GenerationConfig:
    """Sampling and length settings; zero values are left unset."""

    temperature: float = 0.0
    top_p: float = 0.0
    top_k: int = 0
    max_output_tokens: int = 0
    stop_sequences: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        pairs = (
            ("temperature", self.temperature),
            ("topP", self.top_p),
            ("topK", self.top_k),
            ("maxOutputTokens", self.max_output_tokens),
            ("stopSequences", list(self.stop_sequences)),
        )
        return {key: value for key, value in pairs if value}


@dataclass
class GenerateContentRequest:
    """A generateContent request."""

    contents: list[Content] = field(default_factory=list)
    tools: list[Tool] = field(default_factory=list)
    generation_config: GenerationConfig = field(default_factory=GenerationConfig)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"contents": [c.to_dict() for c in self.contents]}
        if self.tools:
            out["tools"] = [t.to_dict() for t in self.tools]
        out["generationConfig"] = self.generation_config.to_dict()
        return out


@dataclass
class SafetyRating:
    """A safety rating for a candidate."""

    category: str = ""
    probability: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SafetyRating:
        return cls(category=data.get("category") or "", probability=data.get("probability") or "")


@dataclass
class Candidate:
    """One response candidate."""

    content: Content = field(default_factory=Content)
    finish_reason: str = ""
    index: int = 0
    safety_ratings: list[SafetyRating] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Candidate:
        return cls(
            content=Content.from_dict(data.get("content") or {}),
            finish_reason=data.get("finishReason") or "",
            index=data.get("index") or 0,
            safety_ratings=[SafetyRating.from_dict(r) for r in data.get("safetyRatings") or []],
        )


@dataclass
class UsageMetadata:
    """Token counts reported by Gemini."""

    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UsageMetadata:
        return cls(
            prompt_token_count=data.get("promptTokenCount") or 0,
            candidates_token_count=data.get("candidatesTokenCount") or 0,
            total_token_count=data.get("totalTokenCount") or 0,
        )


@dataclass
class GenerateContentResponse:
    """A generateContent response."""

    candidates: list[Candidate] = field(default_factory=list)
    usage_metadata: UsageMetadata = field(default_factory=UsageMetadata)
    model_version: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GenerateContentResponse:
        return cls(
            candidates=[Candidate.from_dict(c) for c in data.get("candidates") or []],
            usage_metadata=UsageMetadata.from_dict(data.get("usageMetadata") or {}),
            model_version=data.get("modelVersion") or "",
        )


@dataclass
class EmbedContentRequest:
    """An embedContent request."""

    content: Content = field(default_factory=Content)
    task_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"content": self.content.to_dict()}
        if self.task_type:
            out["taskType"] = self.task_type
        return out


@dataclass
class EmbeddingValue:
    """An embedding vector."""

    values: list[float] = field(default_factory=list)


@dataclass
class EmbedContentResponse:
    """An embedContent response."""

    embedding: EmbeddingValue = field(default_factory=EmbeddingValue)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmbedContentResponse:
        embedding = data.get("embedding") or {}
        return cls(embedding=EmbeddingValue(values=list(embedding.get("values") or [])))


_ROLE_MAP = {"assistant": "model", "system": "user"}

_FINISH_REASONS = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
}


def openai_to_gemini(
    req: openai.ChatCompletionRequest, model: str
) -> GenerateContentRequest:
    """Convert an OpenAI chat request to a Gemini generateContent request."""
    contents = [
        Content(role=_ROLE_MAP.get(msg.role, msg.role), parts=[Part(text=msg.content)])
        for msg in req.messages
    ]
    config = GenerationConfig()
    if req.temperature is not None and req.temperature > 0:
        config.temperature = req.temperature
    if req.top_p is not None and req.top_p > 0:
        config.top_p = req.top_p
    if req.max_tokens is not None and req.max_tokens > 0:
        config.max_output_tokens = req.max_tokens
    stop = req.stop
    if isinstance(stop, str):
        if stop:
            config.stop_sequences = [stop]
    elif isinstance(stop, (list, tuple)) and stop and all(isinstance(s, str) for s in stop):
        config.stop_sequences = list(stop)
    return GenerateContentRequest(contents=contents, generation_config=config)


def gemini_to_openai(
    resp: GenerateContentResponse, model: str
) -> openai.ChatCompletionResponse:
    """Convert a Gemini generateContent response to an OpenAI chat response."""
    choices = []
    for candidate in resp.candidates:
        content = ""
        for part in candidate.content.parts:
            if content and part.text:
                content += " "
            content += part.text
        choices.append(
            openai.Choice(
                index=candidate.index,
                message=openai.Message(role="assistant", content=content),
                finish_reason=_FINISH_REASONS.get(candidate.finish_reason, "stop"),
            )
        )
    usage = resp.usage_metadata
    return openai.ChatCompletionResponse(
        id="gemini-" + model,
        object="chat.completion",
        created=0,
        model=model,
        choices=choices,
        usage=openai.Usage(
            prompt_tokens=usage.prompt_token_count,
            completion_tokens=usage.candidates_token_count,
            total_tokens=usage.total_token_count,
        ),
    )


def embeddings_openai_to_gemini(req: openai.EmbeddingRequest) -> EmbedContentRequest:
    """Convert an OpenAI embedding request; only the first input is used."""
    text = ""
    value = req.input
    if isinstance(value, str):
        text = value
    elif isinstance(value, (list, tuple)) and value and isinstance(value[0], str):
        text = value[0]
    return EmbedContentRequest(
        content=Content(parts=[Part(text=text)]),
        task_type="RETRIEVAL_DOCUMENT",
    )


def embeddings_gemini_to_openai(
    resp: EmbedContentResponse, model: str
) -> openai.EmbeddingResponse:
    """Convert a Gemini embedding response; token usage is approximated by vector length."""
    values = list(resp.embedding.values)
    return openai.EmbeddingResponse(
        object="list",
        data=[openai.Embedding(object="embedding", embedding=values, index=0)],
        model=model,
        usage=openai.Usage(total_tokens=len(values)),
    )