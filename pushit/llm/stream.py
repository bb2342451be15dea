"""Server-sent event decoding for streamed chat completions."""

import codecs
import json
import logging
from dataclasses import dataclass
from typing import Iterable, Union

from pushit.llm.base import EmptyGeneration

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class Done:
    pass


@dataclass(frozen=True)
class Skip:
    reason: str


Frame = Union[TextDelta, Done, Skip]


def decode_frame(line: str) -> Frame:
    """Decode one SSE line into a frame variant.

    Only `data: {"choices": [{"delta": {"content": "..."}}]}` yields text;
    comments, keep-alives and any other shape decode to Skip.
    """
    line = line.rstrip('\r')
    if not line.startswith(DATA_PREFIX):
        return Skip("not a data line")

    payload = line[len(DATA_PREFIX):]
    if payload.strip() == DONE_SENTINEL:
        return Done()

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return Skip("invalid json")

    if not isinstance(data, dict):
        return Skip("payload is not an object")
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return Skip("no choices")
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return Skip("no delta")
    content = delta.get("content")
    if not isinstance(content, str) or not content:
        return Skip("no content")
    return TextDelta(content)


class StreamConsumer:
    """Accumulates generated text from raw SSE byte chunks.

    Lines and multi-byte characters split across chunk boundaries are held
    back until the rest arrives.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self._pending = ""
        self._parts: list[str] = []
        self.done = False

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, chunk: bytes) -> str:
        """Consume one chunk and return the text it contributed."""
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split('\n')
        return self._consume(lines)

    def finish(self) -> str:
        """Flush buffered input and return the full text.

        Raises EmptyGeneration when the stream carried no content.
        """
        self._pending += self._decoder.decode(b'', final=True)
        if self._pending:
            self._consume([self._pending])
            self._pending = ""

        text = self.text
        if not text:
            raise EmptyGeneration("No commit message generated")
        return text

    def _consume(self, lines: list[str]) -> str:
        added = []
        for line in lines:
            frame = decode_frame(line)
            if isinstance(frame, TextDelta):
                self._parts.append(frame.text)
                added.append(frame.text)
            elif isinstance(frame, Done):
                self.done = True
            elif line.strip() and line.startswith(DATA_PREFIX):
                logger.debug("skipping SSE frame (%s): %.80s", frame.reason, line)
        return "".join(added)


def consume_stream(chunks: Iterable[bytes]) -> str:
    """Drain an iterable of byte chunks and return the accumulated text."""
    consumer = StreamConsumer()
    for chunk in chunks:
        consumer.feed(chunk)
    return consumer.finish()
