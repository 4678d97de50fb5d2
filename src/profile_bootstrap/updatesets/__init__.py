"""Update checking split into small modules.

 - ``types``: targets, probes and results
 - ``check``: the generic installed-vs-available comparison
 - ``sources``: package-manager and module-registry backends
 - ``report``: logging and stderr summaries
"""

from __future__ import annotations

from .types import UpdateEntry, UpdateResult, UpdateTarget, VersionProbe
from .check import check_updates
from .sources import (
    MODULE_CHECKER,
    PACKAGE_CHECKER,
    check_modules,
    check_packages,
    list_packages,
    normalize_name,
    registry_probe,
)
from .report import log_results, report_results

__all__ = [
    "UpdateEntry",
    "UpdateResult",
    "UpdateTarget",
    "VersionProbe",
    "check_updates",
    "MODULE_CHECKER",
    "PACKAGE_CHECKER",
    "check_modules",
    "check_packages",
    "list_packages",
    "normalize_name",
    "registry_probe",
    "log_results",
    "report_results",
]
