"""Daily throttle for the update check.

The gate persists the date of the last check in a one-line marker file and
answers a single question: has the check already run today?

Failures fail open. If the marker cannot be read or written the gate says
"do not skip", preferring an extra check over never checking again.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from .errors import MarkerError
from .io_safe import atomic_write
from .logging_utils import log_event
from .ui import warn


class LastRunGate:
    """Last-run marker stored at ``path`` as ``YYYY-MM-DD``."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> date:
        """Return the stored date; raise :class:`MarkerError` when unusable."""
        try:
            text = self.path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise MarkerError(f"cannot read {self.path}: {e}") from e
        try:
            return date.fromisoformat(text)
        except ValueError as e:
            raise MarkerError(f"invalid marker {text!r} in {self.path}") from e

    def write(self, day: date) -> None:
        try:
            atomic_write(self.path, day.isoformat() + "\n")
        except OSError as e:
            raise MarkerError(f"cannot write {self.path}: {e}") from e

    def should_skip_today(self, today: Optional[date] = None) -> bool:
        """Return True when a check already ran today.

        On the first call ever the marker is created holding yesterday, so the
        answer is always "do not skip". When the answer is "do not skip" the
        marker is moved to today.
        """
        today = today or date.today()
        try:
            if not self.path.exists():
                self.write(today - timedelta(days=1))
                log_event("marker_initialized", path=str(self.path))
            last = self.read()
            if last == today:
                logging.debug("Update check already ran on %s", last)
                return True
            self.write(today)
            log_event("marker_advanced", previous=last.isoformat(), today=today.isoformat())
            return False
        except MarkerError as e:
            logging.info("Last-run marker unusable: %s", e)
            warn(f"Last-run marker unusable ({e}); checking for updates anyway.")
            self._repair(today)
            return False

    def _repair(self, today: date) -> None:
        try:
            self.write(today)
        except MarkerError as e:
            logging.debug("Marker repair failed: %s", e)


__all__ = ["LastRunGate"]
