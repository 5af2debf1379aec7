"""Parsing of server-sent event lines from OpenAI-style streams."""

from __future__ import annotations

from dataclasses import dataclass

_DONE_MARKER = "data: [DONE]"


def _as_text(line: bytes | str) -> str:
    if isinstance(line, (bytes, bytearray)):
        return bytes(line).decode("utf-8", errors="replace")
    return line


def is_done_marker(line: bytes | str) -> bool:
    """Return whether the line is the ``data: [DONE]`` end-of-stream marker."""
    return _as_text(line).startswith(_DONE_MARKER)


def extract_data(line: bytes | str) -> str:
    """Return the payload of a ``data:`` line without the prefix or line ending."""
    text = _as_text(line)
    if text.startswith("data:"):
        text = text[len("data:"):]
    return text.lstrip(" ").rstrip("\r\n")


def parse_sse_line(line: bytes | str) -> tuple[str, str, bool]:
    """Parse one SSE line into ``(event, data, is_done)``.

    Empty lines, comments and unknown fields yield empty strings.
    """
    text = _as_text(line)
    if not text or text.startswith(":"):
        return "", "", False
    if text.startswith(_DONE_MARKER):
        return "", "", True
    if text.startswith("event:"):
        prefix = "event: "
        return (text[len(prefix):] if text.startswith(prefix) else text), "", False
    if text.startswith("data:"):
        return "", extract_data(text), False
    return "", "", False


@dataclass
class StreamChunk:
    """A raw chunk of streamed data, or the end-of-stream marker."""

    data: bytes = b""
    done: bool = False