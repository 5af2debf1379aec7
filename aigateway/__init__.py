"""Client layer for OpenAI-compatible and Gemini LLM providers, with SSE streaming, retries, quotas and rate limiting."""

__version__ = "0.1.0"