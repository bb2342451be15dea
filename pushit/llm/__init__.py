"""LLM Client Package"""

from pushit.config import GenerationSettings
from pushit.llm.base import (
    LLMClient, LLMResponse, GenerationResult,
    LLMError, ApiError, NoResponseBody, EmptyGeneration,
)
from pushit.llm.claude import ClaudeClient
from pushit.llm.openrouter import OpenRouterClient
from pushit.llm.sanitizer import sanitize_message
from pushit.llm.stream import StreamConsumer, consume_stream

PROVIDERS = {
    "openrouter": OpenRouterClient,
    "claude": ClaudeClient,
}


def get_client(provider: str, settings: GenerationSettings, timeout: float | None = None) -> LLMClient:
    """Get an LLM client for 'openrouter' or 'claude'."""
    if provider not in PROVIDERS:
        raise LLMError(f"Unknown provider: {provider}. Use one of: {', '.join(PROVIDERS)}.")
    return PROVIDERS[provider](settings, timeout=timeout)


__all__ = [
    "LLMClient",
    "LLMResponse",
    "GenerationResult",
    "LLMError",
    "ApiError",
    "NoResponseBody",
    "EmptyGeneration",
    "ClaudeClient",
    "OpenRouterClient",
    "StreamConsumer",
    "consume_stream",
    "sanitize_message",
    "get_client",
    "PROVIDERS",
]
