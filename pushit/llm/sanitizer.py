"""Reduce free-form model output to a single commit message line."""

import re

from pushit import CONVENTIONAL_RE

FENCE_RE = re.compile(r'^```(?:[\w+.-]*\n)?(.*?)```$', re.DOTALL)
QUOTES = ('"', "'")


def _unwrap_fence(msg: str) -> str:
    match = FENCE_RE.match(msg)
    return match.group(1).strip() if match else msg


def _unwrap_backticks(msg: str) -> str:
    if len(msg) >= 2 and msg.startswith('`') and msg.endswith('`') and '\n' not in msg:
        return msg[1:-1]
    return msg


def _unwrap_quotes(msg: str) -> str:
    if len(msg) >= 2 and msg[0] in QUOTES and msg[-1] == msg[0]:
        return msg[1:-1]
    return msg


def _strip_period(msg: str) -> str:
    return msg[:-1] if msg.endswith('.') else msg


def _pick_line(msg: str) -> str:
    lines = msg.split('\n')
    for line in lines:
        # `feat: x`. still counts as wrapped
        candidate = _strip_period(line.strip())
        match = CONVENTIONAL_RE.search(_unwrap_quotes(_unwrap_backticks(candidate)))
        if match:
            return match.group(0)
    return next((line for line in lines if line.strip()), "")


def _sanitize_once(raw: str) -> str:
    msg = raw.strip()
    msg = _unwrap_fence(msg)
    msg = _unwrap_backticks(msg)
    msg = _unwrap_quotes(msg)
    msg = _strip_period(_pick_line(msg).strip())
    return msg.strip()


def sanitize_message(raw: str) -> str:
    """Clean up model output into one conventional-commit line.

    Unwraps code fences, backticks and quotes, then keeps the first
    `type(scope): description` match found on any line, falling back to the
    first non-blank line. A trailing period is dropped. Never raises; the
    result may still not match the grammar.

    The cleanup passes are repeated until nothing changes, so the function
    is idempotent: "feat: x.." loses its periods one pass at a time.
    Each pass only removes characters, which bounds the loop.
    """
    msg = _sanitize_once(raw)
    while True:
        cleaned = _sanitize_once(msg)
        if cleaned == msg:
            return msg
        msg = cleaned
