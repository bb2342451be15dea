"""LLM Base Classes and Shared Code"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from pushit.llm.sanitizer import sanitize_message


@dataclass
class LLMResponse:
    """Raw response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


@dataclass(frozen=True)
class GenerationResult:
    """A sanitized, single-line commit message."""
    message: str


class LLMError(Exception):
    """Raised when LLM operations fail."""
    pass


class ApiError(LLMError):
    """The provider answered with a non-success status."""

    def __init__(self, status: int, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"API error ({status}): {detail}")


class NoResponseBody(LLMError):
    """The provider answered without a readable body."""
    pass


class EmptyGeneration(LLMError):
    """The provider produced no usable text."""
    pass


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    @abstractmethod
    def generate(self, prompt: str) -> LLMResponse:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    def generate_message(self, prompt: str) -> GenerationResult:
        """Generate and sanitize one commit message line."""
        response = self.generate(prompt)
        message = sanitize_message(response.content)
        if not message:
            raise EmptyGeneration("No commit message generated")
        return GenerationResult(message=message)
