"""Terminal Output Formatting Package

Everything user-facing goes through here. The generated message is the only
thing written to stdout when it is piped; spinners and errors use stderr.
"""

import os
import re
import shutil
import sys
import textwrap
import threading

from pushit import CONVENTIONAL_PREFIX


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'
    MAGENTA = '\033[35m'


def _supports_color(stream=None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get('NO_COLOR') or os.environ.get('TERM') == 'dumb':
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not getattr(stream, 'isatty', None) or not stream.isatty():
        return False
    if sys.platform == 'win32':
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            # ENABLE_VIRTUAL_TERMINAL_PROCESSING on the stdout handle
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
            return True
        except Exception:
            return False
    return True


def _can_encode(text: str, stream=None) -> bool:
    encoding = getattr(stream or sys.stdout, 'encoding', None) or 'utf-8'
    try:
        text.encode(encoding)
        return True
    except (UnicodeEncodeError, LookupError):
        return False


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _can_encode('✓╭─╯⠋→')

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'
ARROW = '→' if UNICODE_ENABLED else '->'


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


def success(text: str) -> str:
    return _colorize(text, Colors.GREEN)


def error(text: str) -> str:
    return _colorize(text, Colors.RED)


def warning(text: str) -> str:
    return _colorize(text, Colors.YELLOW)


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_warning(message: str) -> None:
    marker = '⚠' if UNICODE_ENABLED else '[!]'
    print(f"{warning(marker)} {warning(message)}", file=sys.stderr)


def print_box(text: str, padding: int = 3) -> None:
    """Print text in a rounded box, wrapping lines wider than the terminal."""
    term_width = shutil.get_terminal_size((80, 24)).columns
    # Box chrome takes 2 chars plus padding on both sides
    max_width = max(int(term_width * 0.8), 40) - 2 - padding * 2

    wrapped_lines = []
    for line in text.split('\n'):
        if len(line) > max_width:
            wrapped_lines.extend(textwrap.wrap(line, width=max_width))
        else:
            wrapped_lines.append(line)

    content_width = max((len(line) for line in wrapped_lines), default=0)
    inner = content_width + padding * 2

    if UNICODE_ENABLED:
        top, bottom, side, rule = '╭', '╰', '│', '─'
        top_end, bottom_end = '╮', '╯'
    else:
        top = bottom = top_end = bottom_end = '+'
        side, rule = '|', '-'

    pad = ' ' * padding
    print()
    print(dim(f"{top}{rule * inner}{top_end}"))
    print(dim(f"{side}{' ' * inner}{side}"))
    for line in wrapped_lines:
        fill = ' ' * (content_width - len(line))
        print(f"{dim(side)}{pad}{bold(colorize_commit_type(line))}{fill}{pad}{dim(side)}")
    print(dim(f"{side}{' ' * inner}{side}"))
    print(dim(f"{bottom}{rule * inner}{bottom_end}"))
    print()


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'fix': Colors.RED,
    'refactor': Colors.YELLOW,
    'docs': Colors.CYAN,
    'test': Colors.MAGENTA,
    'perf': Colors.GREEN,
    'chore': Colors.DIM,
    'style': Colors.DIM,
    'ci': Colors.CYAN,
    'build': Colors.CYAN,
    'revert': Colors.YELLOW,
}

COMMIT_PREFIX_RE = re.compile(rf'^{CONVENTIONAL_PREFIX}')


def colorize_commit_type(message: str) -> str:
    """Color the `type(scope):` prefix of a commit line."""
    if not COLORS_ENABLED:
        return message
    match = COMMIT_PREFIX_RE.match(message)
    if not match:
        return message
    prefix = match.group(0)
    return _colorize(prefix, Colors.BOLD, COMMIT_TYPE_COLORS[match.group('type')]) + message[len(prefix):]


class Spinner:
    """Animated stderr spinner for long operations. Use as context manager.

    Runs on its own thread so it keeps turning while the event loop or a
    worker thread is blocked on git or the network.
    """
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, label: str = "", stream=None):
        self.label = label
        self.stream = stream or sys.stderr
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII

    @property
    def active(self) -> bool:
        return self.stream.isatty()

    def _spin(self):
        idx = 0
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            self.stream.write(f'\r\033[K{frame} {self.label}')
            self.stream.flush()
            idx += 1
            self._stop_event.wait(0.08)

    def __enter__(self):
        if self.active:
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
            self._thread = None
            self.stream.write('\r\033[K')
            self.stream.flush()


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "ARROW",
    "success", "error", "warning", "info", "dim", "bold",
    "print_success", "print_error", "print_warning", "print_box",
    "colorize_commit_type", "Spinner", "COMMIT_TYPE_COLORS",
]
