"""Unified provider responses, complete or streamed."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

from aigateway.config import APIType
from aigateway.openai_types import ChatCompletionResponse, EmbeddingResponse, ImageResponse
from aigateway.sse import StreamChunk


class ChunkType(enum.Enum):
    """The format of a streamed chunk."""

    OPENAI = 0
    OPEN_RESPONSES = 1


@dataclass
class Chunk:
    """A streamed chunk in either OpenAI or OpenResponses form."""

    type: ChunkType = ChunkType.OPENAI
    openai: StreamChunk | None = None
    or_event: Any = None
    done: bool = False


def openai_chunk(data: bytes | str) -> Chunk:
    """Return an OpenAI chunk carrying ``data``."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return Chunk(type=ChunkType.OPENAI, openai=StreamChunk(data=bytes(data)))


def openai_chunk_done() -> Chunk:
    """Return the OpenAI end-of-stream chunk."""
    return Chunk(type=ChunkType.OPENAI, openai=StreamChunk(done=True), done=True)


@dataclass
class Response:
    """A provider response: one complete payload, or a stream of chunks.

    Iterating a streaming response yields its chunks; stream errors are
    raised from the iteration. Use it as a context manager to close it.
    """

    api_type: APIType
    stream: bool = False
    chat_completion: ChatCompletionResponse | None = None
    or_response: Any = None
    embedding: EmbeddingResponse | None = None
    image: ImageResponse | None = None
    chunks: Iterable[Chunk] | None = None
    close_func: Callable[[], None] | None = None

    def close(self) -> None:
        """Release the underlying stream, if any."""
        if self.close_func is not None:
            self.close_func()

    def __enter__(self) -> Response:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[Chunk]:
        if not self.stream or self.chunks is None:
            raise ValueError("response is not streaming")
        return iter(self.chunks)

    def expect_chat_completion(self) -> ChatCompletionResponse:
        """Return the chat completion payload or raise ``ValueError``."""
        if self.chat_completion is not None:
            return self.chat_completion
        raise ValueError("no response data available")

    def expect_embedding(self) -> EmbeddingResponse:
        """Return the embedding payload or raise ``ValueError``."""
        if self.embedding is not None:
            return self.embedding
        raise ValueError("no embedding response data available")

    def expect_image(self) -> ImageResponse:
        """Return the image payload or raise ``ValueError``."""
        if self.image is not None:
            return self.image
        raise ValueError("no image response data available")


def chat_completion_response(resp: ChatCompletionResponse) -> Response:
    """Wrap a complete chat completion."""
    return Response(api_type=APIType.CHAT_COMPLETIONS, chat_completion=resp)


def embedding_response(resp: EmbeddingResponse) -> Response:
    """Wrap a complete embedding response."""
    return Response(api_type=APIType.EMBEDDINGS, embedding=resp)


def image_response(resp: ImageResponse) -> Response:
    """Wrap a complete image response."""
    return Response(api_type=APIType.IMAGES, image=resp)


def streaming_response(
    api_type: APIType,
    chunks: Iterable[Chunk],
    close: Callable[[], None] | None,
) -> Response:
    """Wrap a stream of chunks."""
    return Response(api_type=api_type, stream=True, chunks=chunks, close_func=close)