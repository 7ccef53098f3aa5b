"""Terminal Output Formatting Package

Colour and symbol helpers for gortex's console output. Colour follows the
NO_COLOR / FORCE_COLOR conventions and is off when stdout is not a terminal,
so piped output stays plain.
"""

import logging
import os
import re
import sys
import threading


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if os.environ.get('TERM') == 'dumb':
        return False
    if not hasattr(sys.stdout, 'isatty') or not sys.stdout.isatty():
        return False
    if sys.platform == 'win32':
        # Turn on VT processing so the escape codes render in cmd.exe
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
        except (AttributeError, OSError):
            return False
    return True


def _supports_unicode() -> bool:
    encoding = getattr(sys.stdout, 'encoding', None) or 'utf-8'
    try:
        '✓─⠋'.encode(encoding)
        return True
    except (UnicodeEncodeError, LookupError):
        return False


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'
RULE = '─' if UNICODE_ENABLED else '-'


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
    """Errors go to stderr so pipe mode keeps stdout to the bare message."""
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_warning(message: str) -> None:
    symbol = '⚠' if UNICODE_ENABLED else '[!]'
    print(f"{warning(symbol)} {warning(message)}", file=sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    """Route gortex's log records to stderr. DEBUG with --verbose, else WARNING."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(dim("%(name)s: %(message)s")))

    root = logging.getLogger("gortex")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'fix': Colors.RED,
    'docs': Colors.CYAN,
    'style': Colors.DIM,
    'refactor': Colors.YELLOW,
    'perf': Colors.GREEN,
    'test': Colors.MAGENTA,
    'build': Colors.CYAN,
    'ci': Colors.CYAN,
    'chore': Colors.DIM,
    'revert': Colors.YELLOW,
}

_HEADER_RE = re.compile(r'^(\w+)(\([^)]*\))?(!)?:')
_FOOTER = 'BREAKING CHANGE:'


def colorize_commit_type(message: str) -> str:
    """
    Color a commit message for display.

    The type prefix on the header takes its type's color, the "!" marker and
    the BREAKING CHANGE footer label are red. Unknown types stay plain.
    """
    if not COLORS_ENABLED:
        return message

    lines = message.split('\n')
    match = _HEADER_RE.match(lines[0])
    if match and match.group(1) in COMMIT_TYPE_COLORS:
        color = COMMIT_TYPE_COLORS[match.group(1)]
        prefix = match.group(1) + (match.group(2) or '')
        marker = error(match.group(3)) if match.group(3) else ''
        lines[0] = _colorize(prefix, Colors.BOLD, color) + marker + _colorize(':', Colors.BOLD, color) \
            + lines[0][match.end():]

    for i, line in enumerate(lines[1:], 1):
        if line.startswith(_FOOTER):
            lines[i] = _colorize(_FOOTER, Colors.BOLD, Colors.RED) + line[len(_FOOTER):]
    return '\n'.join(lines)


class Spinner:
    """
    Animated spinner with an optional label, shown while waiting on a provider.

    Use as context manager. Draws nothing when stdout is not a terminal and
    clears its line on exit.
    """
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']
    INTERVAL = 0.08

    def __init__(self, label: str = ""):
        self.label = label
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII

    def _spin(self):
        idx = 0
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{info(frame)} {self.label}', end='', flush=True)
            idx += 1
            self._stop_event.wait(self.INTERVAL)

    def __enter__(self):
        if sys.stdout.isatty():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
            self._thread = None
            print('\r\033[K', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "RULE",
    "success", "error", "warning", "info", "dim", "bold",
    "print_success", "print_error", "print_warning", "setup_logging",
    "colorize_commit_type", "Spinner", "COMMIT_TYPE_COLORS",
]
