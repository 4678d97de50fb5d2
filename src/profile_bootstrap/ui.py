"""Console message helpers for shell startup.

The bootstrapper's stdout is evaluated by the calling shell, so every
human-facing message is written to stderr instead:
 - ANSI color codes gated by a conservative capability check on stderr
 - Printers for info/ok/warn/err with consistent prefixes

Respects ``NO_COLOR`` and never raises on capability checks.
"""

from __future__ import annotations
import os
import sys

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"


def supports_color() -> bool:
    """Return True when stderr is a TTY and ``NO_COLOR`` is unset."""
    try:
        if os.environ.get("NO_COLOR"):
            return False
        return bool(getattr(sys.stderr, "isatty", lambda: False)())
    except Exception:
        return False


def c(s: str, color: str) -> str:
    """Wrap ``s`` in ``color`` when the terminal supports it."""
    return f"{color}{s}{RESET}" if supports_color() else s


def _emit(prefix: str, color: str, msg: str) -> None:
    print(c(prefix, color) + msg, file=sys.stderr)


def info(msg: str) -> None:
    _emit("ℹ ", BLUE, msg)


def ok(msg: str) -> None:
    _emit("✓ ", GREEN, msg)


def warn(msg: str) -> None:
    _emit("! ", YELLOW, msg)


def err(msg: str) -> None:
    _emit("✗ ", RED, msg)


__all__ = [
    "supports_color",
    "c",
    "info",
    "ok",
    "warn",
    "err",
    "RESET",
    "RED",
    "GREEN",
    "YELLOW",
    "BLUE",
]
