"""Logging configuration helpers (stderr + bounded log file).

This module centralizes logging setup for the bootstrapper:
 - Plain human-readable logs to stderr (never stdout, which the shell evals)
 - Optional append-only log file, one ``[timestamp] [LEVEL] message`` line per
   record, trimmed to its most recent lines once it grows past a limit

Design goals
 - stdlib logging only
 - Idempotent configuration for tests and repeated profile loads
 - Never let a logging failure break shell startup
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from .io_safe import atomic_write

LOG_MAX_LINES = 1000
LOG_KEEP_LINES = 900
FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def trim_log(path: Path, max_lines: int = LOG_MAX_LINES, keep: int = LOG_KEEP_LINES) -> int:
    """Keep only the last ``keep`` lines of ``path`` once it exceeds ``max_lines``.

    Returns the number of lines left in the file. Missing or unreadable files
    count as empty.
    """
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines(True)
    except OSError:
        return 0
    if len(lines) <= max_lines:
        return len(lines)
    tail = lines[-keep:] if keep > 0 else []
    try:
        atomic_write(path, "".join(tail))
    except OSError:
        return len(lines)
    return len(tail)


class TrimmingFileHandler(logging.FileHandler):
    """Append-only file handler that trims the file as it grows.

    The line count is seeded from the file on open and tracked per record, so
    the file is only re-read when it actually crosses ``max_lines``. The file
    is opened eagerly so an unusable path fails here, not on the first record.
    """

    def __init__(
        self,
        filename: str,
        max_lines: int = LOG_MAX_LINES,
        keep_lines: int = LOG_KEEP_LINES,
    ):
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.max_lines = max_lines
        self.keep_lines = keep_lines
        self._lines = trim_log(path, max_lines, keep_lines)
        super().__init__(str(path), mode="a", encoding="utf-8", delay=False)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
            self._lines += self.format(record).count("\n") + 1
            if self._lines > self.max_lines:
                if self.stream is not None:
                    self.stream.close()
                    self.stream = None  # reopened lazily on next emit
                self._lines = trim_log(
                    Path(self.baseFilename), self.max_lines, self.keep_lines
                )
        except Exception:
            self.handleError(record)


def configure_logging(
    verbose: bool,
    log_file: Optional[str] = None,
    log_level: Optional[str] = None,
) -> None:
    """Configure the root logger according to CLI flags.

    Parameters
    - ``verbose``: When ``True``, sets the stderr level to ``DEBUG`` (unless
      ``log_level`` overrides). Otherwise defaults to ``WARNING``.
    - ``log_file``: Optional path of the persistent log. The file always
      records at least ``INFO`` so a quiet terminal still leaves a trail.
    - ``log_level``: Optional explicit level name (debug, info, warning, error).

    Handlers added by a previous call are removed and closed first.
    """
    if log_level:
        level = _LEVELS.get(log_level.lower(), logging.WARNING)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger()

    for h in list(logger.handlers):
        if getattr(h, "_added_by_configure_logging", False):
            logger.removeHandler(h)
            h.close()

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream.setLevel(level)
    setattr(stream, "_added_by_configure_logging", True)
    logger.addHandler(stream)

    root_level = level
    if log_file:
        try:
            fh = TrimmingFileHandler(log_file)
        except OSError as exc:
            logger.warning("Could not open log file %s: %s", log_file, exc)
        else:
            fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
            fh.setLevel(min(level, logging.INFO))
            setattr(fh, "_added_by_configure_logging", True)
            logger.addHandler(fh)
            root_level = min(level, logging.INFO)

    logger.setLevel(root_level)


def log_event(event: str, level: int = logging.INFO, **fields) -> None:
    """Emit a structured event log at the given level.

    ``fields`` are attached to the record via ``extra`` and appended to the
    message as ``key=value`` pairs. The function never raises.
    """
    try:
        suffix = " ".join(f"{k}={v}" for k, v in fields.items())
        msg = f"{event} {suffix}" if suffix else event
        logging.getLogger().log(level, msg, extra={"event": event, **fields})
    except Exception:
        pass


__all__ = [
    "configure_logging",
    "log_event",
    "trim_log",
    "TrimmingFileHandler",
    "LOG_MAX_LINES",
    "LOG_KEEP_LINES",
]
