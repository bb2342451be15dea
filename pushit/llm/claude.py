"""Claude (Anthropic) LLM Client"""

import logging

from pushit.config import GenerationSettings
from pushit.llm.base import LLMClient, LLMResponse, LLMError, ApiError, EmptyGeneration

logger = logging.getLogger(__name__)


class ClaudeClient(LLMClient):
    """Claude API client streaming through the Anthropic SDK."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    DEFAULT_TIMEOUT = 60
    MAX_TOKENS = 64
    TEMPERATURE = 0.4

    def __init__(self, settings: GenerationSettings, timeout: float | None = None):
        self.api_key = settings.api_key
        self.model = settings.model or self.DEFAULT_MODEL
        self.timeout = timeout or self.DEFAULT_TIMEOUT

        try:
            from anthropic import Anthropic
        except ImportError:
            raise LLMError(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

        client_kwargs = {"api_key": self.api_key, "timeout": self.timeout, "max_retries": 0}
        if settings.api_url:
            client_kwargs["base_url"] = settings.api_url
        self._client = Anthropic(**client_kwargs)

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def generate(self, prompt: str) -> LLMResponse:
        from anthropic import APIConnectionError, APIStatusError

        parts = []
        tokens_used = 0
        logger.debug("streaming from %s, prompt=%d chars", self.model, len(prompt))

        try:
            with self._client.messages.stream(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                messages=[{"role": "user", "content": prompt}],
            ) as stream:
                for text in stream.text_stream:
                    parts.append(text)
                final = stream.get_final_message()
                if final.usage:
                    tokens_used = final.usage.input_tokens + final.usage.output_tokens
        except APIStatusError as e:
            raise ApiError(e.status_code, e.response.text or e.message)
        except APIConnectionError as e:
            raise LLMError(f"Claude API connection failed: {e}")

        content = "".join(parts).strip()
        if not content:
            raise EmptyGeneration("No commit message generated")

        return LLMResponse(content=content, model=self.model, tokens_used=tokens_used)
