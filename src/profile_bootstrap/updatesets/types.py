"""Typed containers for update checks.

``UpdateTarget`` is what configuration asks us to watch, ``VersionProbe`` is
what a query function reports for one target, and ``UpdateResult`` is the
aggregated outcome of one checker run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class UpdateTarget:
    """A package or module name plus the source/repository it comes from."""

    name: str
    source: str = ""


@dataclass(frozen=True)
class VersionProbe:
    """Installed and available versions for one target.

    ``installed`` is ``None`` when the target is not installed at all.
    ``available`` is ``None`` when the source reports nothing newer, which is
    treated as "matches installed".
    """

    installed: Optional[str]
    available: Optional[str] = None


@dataclass
class UpdateEntry:
    """One target with an update available."""

    name: str
    reason: str
    installed: Optional[str] = None
    available: Optional[str] = None


@dataclass
class UpdateResult:
    """Aggregated outcome for one checker."""

    checker: str
    entries: List[UpdateEntry] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def up_to_date(self) -> bool:
        return not self.entries

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.entries]

    @classmethod
    def failed(cls, checker: str, error: str) -> "UpdateResult":
        """Degraded result: nothing to report, but remember why."""
        return cls(checker=checker, error=error)


__all__ = ["UpdateTarget", "VersionProbe", "UpdateEntry", "UpdateResult"]
