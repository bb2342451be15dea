"""Diff Processor - Fit a unified diff into a character budget."""

import re

FILE_HEADER_RE = re.compile(r'(?=^diff --git )', re.MULTILINE)


def split_diff_sections(diff: str) -> list[str]:
    """Split a diff into per-file sections at each `diff --git` header.

    Any text before the first header becomes its own leading section.
    Concatenating the result gives back the input.
    """
    return [section for section in FILE_HEADER_RE.split(diff) if section]


def _omission_marker(count: int) -> str:
    return f"\n... ({count} more file(s) truncated)"


def truncate_diff(diff: str, max_chars: int) -> str:
    """Keep whole file sections while they fit, then note how many were dropped.

    The result never exceeds max_chars, marker included. If not even the
    first section fits, a prefix of it is kept instead.
    """
    if len(diff) <= max_chars:
        return diff
    if max_chars <= 0:
        return ""

    sections = split_diff_sections(diff)
    total = len(sections)
    kept: list[str] = []
    used = 0

    for index, section in enumerate(sections):
        remaining_after = total - index - 1
        tail = len(_omission_marker(remaining_after)) if remaining_after else 0
        if used + len(section) + tail > max_chars:
            break
        kept.append(section)
        used += len(section)

    if kept:
        return ''.join(kept) + _omission_marker(total - len(kept))

    marker = _omission_marker(total - 1) if total > 1 else "\n... (truncated)"
    room = max_chars - len(marker)
    if room <= 0:
        return diff[:max_chars]
    return sections[0][:room] + marker
