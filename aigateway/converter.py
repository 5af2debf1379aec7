"""Conversion of requests between chat completions and responses formats."""

from __future__ import annotations

from dataclasses import dataclass

from aigateway.config import APIType
from aigateway.request import Request


@dataclass
class Converter:
    """Rewrites requests into a format the provider supports."""

    supported_apis: APIType

    def convert_request(self, req: Request) -> None:
        """Convert ``req`` in place unless its format is already supported."""
        if self.supported_apis.supports(req.api_type):
            return
        if self.supported_apis == APIType.RESPONSES:
            self.chat_completions_to_responses(req)
        else:
            self.responses_to_chat_completions(req)

    def chat_completions_to_responses(self, req: Request) -> None:
        """Move chat messages into responses-style input items."""
        if req.messages:
            req.input = [
                {"type": "message", "role": msg.role, "content": msg.content}
                for msg in req.messages
            ]
            req.messages = []
        req.api_type = APIType.RESPONSES

    def responses_to_chat_completions(self, req: Request) -> None:
        """Turn responses-style input into chat messages.

        Raises ``ValueError`` if the input cannot be read as messages.
        """
        try:
            messages = req.input_to_messages()
        except ValueError as exc:
            raise ValueError(f"convert input to messages: {exc}") from exc
        req.messages = messages
        req.input = None
        req.api_type = APIType.CHAT_COMPLETIONS


def generate_message_id(response_id: str, index: int) -> str:
    """Return the id of the output message at ``index`` of a response."""
    return f"msg_{response_id}_{index}"