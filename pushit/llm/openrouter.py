"""OpenRouter (OpenAI-compatible) streaming chat completions client"""

import http.client
import json
import logging
import socket
import time
import urllib.error
import urllib.request

from pushit.config import GenerationSettings
from pushit.llm.base import LLMClient, LLMResponse, LLMError, ApiError, NoResponseBody
from pushit.llm.stream import StreamConsumer

logger = logging.getLogger(__name__)


class OpenRouterClient(LLMClient):
    """Streams a chat completion from any OpenAI-compatible endpoint."""

    DEFAULT_MODEL = "google/gemini-2.5-flash-preview-09-2025"
    DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
    DEFAULT_TIMEOUT = 60
    CHUNK_SIZE = 4096
    GENERATION_OPTIONS = {
        "reasoning": {"exclude": True, "effort": "none"},
    }
    EXTRA_HEADERS = {
        "HTTP-Referer": "https://github.com/pushit",
        "X-Title": "pushit",
    }

    def __init__(self, settings: GenerationSettings, timeout: float | None = None):
        self.api_key = settings.api_key
        self.model = settings.model or self.DEFAULT_MODEL
        self.api_url = settings.api_url or self.DEFAULT_API_URL
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    @property
    def name(self) -> str:
        return f"OpenRouter ({self.model})"

    def _build_request(self, prompt: str) -> urllib.request.Request:
        payload = {
            "model": self.model,
            "stream": True,
            "messages": [{"role": "user", "content": prompt}],
            **self.GENERATION_OPTIONS,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            **self.EXTRA_HEADERS,
        }
        return urllib.request.Request(
            self.api_url,
            data=json.dumps(payload).encode('utf-8'),
            headers=headers,
            method="POST",
        )

    def _read_stream(self, response, deadline: float) -> str:
        if response.status == 204 or response.headers.get("Content-Length") == "0":
            raise NoResponseBody("No response body")

        consumer = StreamConsumer()
        while True:
            chunk = response.read1(self.CHUNK_SIZE)
            if not chunk:
                break
            consumer.feed(chunk)
            if time.monotonic() > deadline:
                raise LLMError(f"Request timed out after {self.timeout}s")
        return consumer.finish()

    def generate(self, prompt: str) -> LLMResponse:
        request = self._build_request(prompt)
        deadline = time.monotonic() + self.timeout
        logger.debug("POST %s model=%s prompt=%d chars", self.api_url, self.model, len(prompt))

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                content = self._read_stream(response, deadline)
        except urllib.error.HTTPError as e:
            detail = e.read().decode('utf-8', errors='replace') if e.fp else str(e.reason)
            raise ApiError(e.code, detail)
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise LLMError(f"Request timed out after {self.timeout}s")
            raise LLMError(f"Request to {self.api_url} failed: {e.reason}")
        except socket.timeout:
            raise LLMError(f"Request timed out after {self.timeout}s")
        except (http.client.HTTPException, OSError) as e:
            raise LLMError(f"Connection lost while streaming: {e}")

        return LLMResponse(content=content.strip(), model=self.model)
