"""Immutable bootstrap configuration.

:class:`BootstrapConfig` is built once at startup from built-in defaults and
an optional JSON file, then passed explicitly to each step. Nothing here
touches ``os.environ``; exporting variables is the job of the environment
script.

Design notes:
 - Loading never raises. A missing file yields defaults; an unreadable or
   non-object file yields defaults plus a warning.
 - A malformed target list only disables the checker that uses it. The
   matching field is set to ``None`` and the reason kept in ``errors``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .errors import ConfigError
from .ui import warn
from .updatesets.types import UpdateTarget

DEFAULT_TIMEOUT = 5.0
DEFAULT_REPOSITORIES = {"PyPI": "https://pypi.org/pypi"}
DEFAULT_LINE_EDITING = {
    "completion-ignore-case": "on",
    "show-all-if-ambiguous": "on",
    "colored-stats": "on",
}
SUPPORTED_SHELLS = ("bash", "zsh")
SUPPORTED_PACKAGE_MANAGERS = ("pip", "brew")


@dataclass(frozen=True)
class BootstrapConfig:
    """Everything a bootstrap run needs, captured once."""

    shell: str = "bash"
    package_manager: str = "pip"
    package_targets: Optional[Tuple[UpdateTarget, ...]] = ()
    module_targets: Optional[Tuple[UpdateTarget, ...]] = ()
    required_modules: Tuple[str, ...] = ()
    repositories: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_REPOSITORIES)
    )
    environment: Mapping[str, str] = field(default_factory=dict)
    prompt_binary: str = "oh-my-posh"
    prompt_config: str = ""
    prompt_timeout: float = DEFAULT_TIMEOUT
    check_timeout: float = DEFAULT_TIMEOUT
    line_editing: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_LINE_EDITING)
    )
    history_search: bool = True
    errors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # mapping fields are read-only views over private copies
        for name in ("repositories", "environment", "line_editing"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @classmethod
    def load(cls, path: Path, **overrides) -> "BootstrapConfig":
        """Load configuration from ``path``; fall back to defaults on error.

        ``overrides`` (e.g. from CLI flags) win over file values; ``None``
        overrides are ignored.
        """
        data: dict = {}
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                warn(f"Could not load config {path}: {e}")
                raw = {}
            if isinstance(raw, dict):
                data = raw
            else:
                warn(f"Could not load config {path}: invalid format")
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "BootstrapConfig":
        known = {f.name for f in fields(cls)} - {"errors"}
        for key in sorted(set(data) - known):
            logging.debug("Ignoring unknown config key %r", key)
        cfg = cls()
        errors = []
        kwargs: dict = {}

        for key, default_source in (
            ("package_targets", data.get("package_manager", cfg.package_manager)),
            ("module_targets", "PyPI"),
        ):
            if key not in data:
                continue
            try:
                kwargs[key] = parse_targets(data[key], str(default_source))
            except ConfigError as e:
                kwargs[key] = None
                errors.append(f"{key}: {e}")

        for key in ("shell", "package_manager", "prompt_binary", "prompt_config"):
            if isinstance(data.get(key), str):
                kwargs[key] = data[key].strip()
        for key in ("prompt_timeout", "check_timeout"):
            value = data.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
                kwargs[key] = float(value)
            elif key in data:
                errors.append(f"{key}: expected a non-negative number")
        if isinstance(data.get("history_search"), bool):
            kwargs["history_search"] = data["history_search"]
        for key in ("repositories", "environment", "line_editing"):
            if key not in data:
                continue
            value = data[key]
            if isinstance(value, dict) and all(isinstance(k, str) for k in value):
                merged = dict(getattr(cfg, key)) if key == "repositories" else {}
                merged.update({k: str(v) for k, v in value.items()})
                kwargs[key] = merged
            else:
                errors.append(f"{key}: expected an object of strings")
        if "required_modules" in data:
            try:
                kwargs["required_modules"] = tuple(
                    t.name for t in parse_targets(data["required_modules"], "PyPI")
                )
            except ConfigError as e:
                errors.append(f"required_modules: {e}")

        if kwargs.get("shell", cfg.shell) not in SUPPORTED_SHELLS:
            errors.append(f"shell: unsupported shell {kwargs['shell']!r}")
            kwargs["shell"] = cfg.shell
        if kwargs.get("package_manager", cfg.package_manager) not in SUPPORTED_PACKAGE_MANAGERS:
            errors.append(
                f"package_manager: unsupported package manager {kwargs['package_manager']!r}"
            )
            kwargs["package_targets"] = None

        return replace(cfg, errors=tuple(errors), **kwargs)


def parse_targets(raw: object, default_source: str) -> Tuple[UpdateTarget, ...]:
    """Turn a JSON target list into ``UpdateTarget`` values.

    Each item is either a name string or an object with ``name`` and an
    optional ``source``/``repository``. Raises :class:`ConfigError` on any
    other shape.
    """
    if not isinstance(raw, list):
        raise ConfigError("expected a list of targets")
    targets = []
    for i, item in enumerate(raw):
        if isinstance(item, str) and item.strip():
            targets.append(UpdateTarget(item.strip(), default_source))
            continue
        if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"].strip():
            source = item.get("source", item.get("repository", default_source))
            if not isinstance(source, str):
                raise ConfigError(f"item {i}: source must be a string")
            targets.append(UpdateTarget(item["name"].strip(), source.strip() or default_source))
            continue
        raise ConfigError(f"item {i}: expected a name or an object with 'name'")
    return tuple(targets)


__all__ = [
    "BootstrapConfig",
    "parse_targets",
    "DEFAULT_TIMEOUT",
    "DEFAULT_REPOSITORIES",
    "SUPPORTED_SHELLS",
    "SUPPORTED_PACKAGE_MANAGERS",
]
