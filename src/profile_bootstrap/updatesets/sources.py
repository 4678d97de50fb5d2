"""Query backends for the two checkers.

 - Package manager: one listing call per backend (``pip`` or ``brew``) yields
   installed versions plus the subset with updates available.
 - Module registry: installed version from ``importlib.metadata`` and the
   available version from a JSON index shaped like the PyPI JSON API.

Both ``check_*`` entry points take plain values only, so they can run in a
worker thread without touching caller state.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from functools import partial
from typing import Dict, Mapping, Optional, Sequence

from ..errors import QueryError
from ..utils import PackageNotFoundError, http_get_json, pkg_version, run_command
from .check import check_updates
from .types import UpdateResult, UpdateTarget, VersionProbe

PACKAGE_CHECKER = "packages"
MODULE_CHECKER = "modules"

Listing = Dict[str, VersionProbe]


def normalize_name(name: str) -> str:
    """PEP 503 style normalization, also fine for Homebrew formula names."""
    return re.sub(r"[-_.]+", "-", name).strip().lower()


def _run_json(argv: Sequence[str], timeout: Optional[float]) -> object:
    code, out, err_ = run_command(list(argv), timeout=timeout)
    if code != 0:
        detail = (err_ or out).strip().splitlines()
        raise QueryError(
            f"{' '.join(argv[:3])} exited {code}: {detail[-1] if detail else 'no output'}"
        )
    try:
        return json.loads(out or "null")
    except ValueError as e:
        raise QueryError(f"unparseable output from {argv[0]}: {e}") from e


def _pip_listing(timeout: Optional[float]) -> Listing:
    base = [sys.executable, "-m", "pip", "list", "--format=json", "--disable-pip-version-check"]
    installed = _run_json(base, timeout)
    outdated = _run_json(base + ["--outdated"], timeout)
    if not isinstance(installed, list) or not isinstance(outdated, list):
        raise QueryError("pip list returned an unexpected shape")
    latest = {
        normalize_name(str(p.get("name", ""))): str(p.get("latest_version", ""))
        for p in outdated
        if isinstance(p, dict) and p.get("latest_version")
    }
    listing: Listing = {}
    for p in installed:
        if not isinstance(p, dict) or not p.get("name"):
            continue
        key = normalize_name(str(p["name"]))
        listing[key] = VersionProbe(str(p.get("version", "")), latest.get(key))
    return listing


def _brew_listing(timeout: Optional[float]) -> Listing:
    code, out, err_ = run_command(["brew", "list", "--versions"], timeout=timeout)
    if code != 0:
        raise QueryError(f"brew list exited {code}: {err_.strip() or 'no output'}")
    listing: Listing = {}
    for line in out.splitlines():
        parts = line.split()
        if len(parts) >= 2:
            listing[normalize_name(parts[0])] = VersionProbe(parts[-1])
    data = _run_json(["brew", "outdated", "--json=v2"], timeout)
    if not isinstance(data, dict):
        raise QueryError("brew outdated returned an unexpected shape")
    for kind in ("formulae", "casks"):
        for item in data.get(kind) or []:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            key = normalize_name(str(item["name"]))
            installed = item.get("installed_versions") or []
            current = installed[-1] if installed else None
            if key in listing:
                current = listing[key].installed
            listing[key] = VersionProbe(current, item.get("current_version"))
    return listing


_LISTERS = {
    "pip": _pip_listing,
    "brew": _brew_listing,
}


def list_packages(manager: str, timeout: Optional[float] = None) -> Listing:
    """Return ``{normalized name: VersionProbe}`` for everything installed."""
    lister = _LISTERS.get(manager)
    if lister is None:
        raise QueryError(f"unsupported package manager {manager!r}")
    return lister(timeout)


def _probe_from_listing(listing: Mapping[str, VersionProbe], target: UpdateTarget) -> VersionProbe:
    return listing.get(normalize_name(target.name), VersionProbe(None))


def check_packages(
    targets: Sequence[UpdateTarget], manager: str = "pip", timeout: Optional[float] = None
) -> UpdateResult:
    """Package-manager checker. A failed listing degrades to "up to date"."""
    if not targets:
        return UpdateResult(checker=PACKAGE_CHECKER)
    try:
        listing = list_packages(manager, timeout)
    except QueryError as e:
        logging.info("Package manager query failed: %s", e)
        return UpdateResult.failed(PACKAGE_CHECKER, str(e))
    wanted = {normalize_name(t.name) for t in targets}
    listing = {k: v for k, v in listing.items() if k in wanted}
    return check_updates(PACKAGE_CHECKER, targets, partial(_probe_from_listing, listing))


def registry_probe(
    target: UpdateTarget, repositories: Mapping[str, str], timeout: float = 3.0
) -> VersionProbe:
    """Installed version locally, available version from the target's index.

    Raises :class:`QueryError` when the repository tag is unknown or the index
    cannot be read.
    """
    try:
        installed = pkg_version(target.name)
    except PackageNotFoundError:
        return VersionProbe(None)
    base = repositories.get(target.source or "PyPI")
    if not base:
        raise QueryError(f"unknown repository {target.source!r}")
    data, error = http_get_json(f"{base.rstrip('/')}/{target.name}/json", timeout=timeout)
    if not data:
        raise QueryError(error or "empty response")
    info = data.get("info") if isinstance(data.get("info"), dict) else {}
    available = info.get("version")
    if not isinstance(available, str) or not available.strip():
        raise QueryError("index response has no version")
    return VersionProbe(installed, available)


def check_modules(
    targets: Sequence[UpdateTarget],
    repositories: Mapping[str, str],
    timeout: float = 3.0,
) -> UpdateResult:
    """Module-registry checker."""
    query = partial(registry_probe, repositories=dict(repositories), timeout=timeout)
    return check_updates(MODULE_CHECKER, targets, query)


__all__ = [
    "PACKAGE_CHECKER",
    "MODULE_CHECKER",
    "normalize_name",
    "list_packages",
    "check_packages",
    "registry_probe",
    "check_modules",
]
