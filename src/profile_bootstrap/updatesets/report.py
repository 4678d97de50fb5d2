from __future__ import annotations

from typing import Iterable

from ..logging_utils import log_event
from ..ui import info, ok, warn
from .types import UpdateResult

_LABELS = {"packages": "Package manager", "modules": "Module registry"}


def _label(checker: str) -> str:
    return _LABELS.get(checker, checker.title())


def log_results(results: Iterable[UpdateResult], forced: bool) -> None:
    """Emit one structured log line per checker."""
    for r in results:
        log_event(
            "update_check_result",
            checker=r.checker,
            updates=",".join(r.names),
            error=r.error or "",
            forced=forced,
        )


def report_results(results: Iterable[UpdateResult], *, verbose: bool = False) -> int:
    """Print discovered updates to stderr; return how many were found.

    Quiet when everything is up to date unless ``verbose`` is set. Checker
    errors and skipped targets are only shown in verbose mode, since they are
    already in the log.
    """
    total = 0
    for r in results:
        label = _label(r.checker)
        if r.entries:
            total += len(r.entries)
            info(f"{label}: {len(r.entries)} update(s) available")
            for e in r.entries:
                info(f"  {e.name} ({e.reason})")
        elif verbose and not r.error:
            ok(f"{label}: up to date")
        if verbose:
            if r.error:
                warn(f"{label} check error: {r.error}")
            for w in r.warnings:
                warn(f"{label}: {w}")
    return total


__all__ = ["log_results", "report_results"]
