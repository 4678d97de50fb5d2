"""Synchronous install of modules the interactive shell relies on.

Each missing module gets its own ``pip install`` call so one failure does not
block the others. Outside a virtualenv installs go to the user site.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, List, Optional, Tuple

from .errors import InstallError
from .logging_utils import log_event
from .ui import info, ok, warn
from .utils import PackageNotFoundError, pkg_version, run_command

INSTALL_TIMEOUT = 300.0


def is_installed(name: str) -> bool:
    try:
        pkg_version(name)
    except PackageNotFoundError:
        return False
    return True


def missing_modules(names: Iterable[str]) -> List[str]:
    """Return the names without an installed distribution, in input order."""
    seen = set()
    missing = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        if not is_installed(name):
            missing.append(name)
    return missing


def _in_virtualenv() -> bool:
    return sys.prefix != getattr(sys, "base_prefix", sys.prefix)


def pip_install_command(name: str) -> List[str]:
    cmd = [sys.executable, "-m", "pip", "install", "--quiet", "--disable-pip-version-check"]
    if not _in_virtualenv():
        cmd.append("--user")
    return cmd + [name]


def install_module(name: str, timeout: Optional[float] = INSTALL_TIMEOUT) -> None:
    """Install one module; raise :class:`InstallError` on failure."""
    code, out, err_ = run_command(pip_install_command(name), timeout=timeout)
    if code != 0:
        detail = (err_ or out).strip().splitlines()
        raise InstallError(
            f"pip install {name} exited {code}: {detail[-1] if detail else 'no output'}"
        )


def install_missing(
    names: Iterable[str], timeout: Optional[float] = INSTALL_TIMEOUT
) -> Tuple[List[str], List[str]]:
    """Install every missing module.

    Returns ``(installed, failures)`` where ``failures`` holds one message per
    module that could not be installed.
    """
    installed: List[str] = []
    failures: List[str] = []
    for name in missing_modules(names):
        info(f"Installing missing module {name}…")
        try:
            install_module(name, timeout=timeout)
        except InstallError as e:
            logging.info("Install failed: %s", e)
            warn(f"Could not install {name}: {e}")
            failures.append(str(e))
            continue
        ok(f"Installed {name}")
        installed.append(name)
    log_event("install_done", installed=",".join(installed), failed=len(failures))
    return installed, failures


__all__ = [
    "INSTALL_TIMEOUT",
    "is_installed",
    "missing_modules",
    "pip_install_command",
    "install_module",
    "install_missing",
]
