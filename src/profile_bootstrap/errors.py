"""Exception types raised inside the bootstrap steps.

Every step of the bootstrap sequence catches these at its own boundary; none
of them is allowed to escape :func:`profile_bootstrap.main_flow.main`.
"""

from __future__ import annotations


class BootstrapError(Exception):
    """Base class for recoverable bootstrap failures."""


class MarkerError(BootstrapError):
    """The last-run marker could not be read or written."""


class QueryError(BootstrapError):
    """An external source (package manager, registry) failed to answer."""


class ConfigError(BootstrapError):
    """Configuration is malformed for the step that needs it."""


class InstallError(BootstrapError):
    """A module installation command failed."""


class ScriptCompileError(BootstrapError):
    """A shell fragment failed the syntax check and must not be evaluated."""


__all__ = [
    "BootstrapError",
    "MarkerError",
    "QueryError",
    "ConfigError",
    "InstallError",
    "ScriptCompileError",
]
