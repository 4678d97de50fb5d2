"""Safe I/O helpers (atomic writes and well-known paths).

Well-known files live under ``PROFILE_BOOTSTRAP_HOME`` (default:
``~/.config/profile-bootstrap``):
 - ``last_update_check``: the last-run marker (one ISO date)
 - ``bootstrap.log``: the trimmed log file
 - ``config.json``: optional user configuration

Writes go through a temporary file in the same directory followed by an
atomic rename, so a shell killed mid-startup never leaves a half-written
marker behind.
"""

from __future__ import annotations
import os
import tempfile
from pathlib import Path

MARKER_NAME = "last_update_check"
LOG_NAME = "bootstrap.log"
CONFIG_NAME = "config.json"


def bootstrap_home() -> Path:
    """Return the per-user state directory, honoring ``PROFILE_BOOTSTRAP_HOME``."""
    override = os.environ.get("PROFILE_BOOTSTRAP_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "profile-bootstrap"


def marker_path(home: Path | None = None) -> Path:
    return (home or bootstrap_home()) / MARKER_NAME


def log_path(home: Path | None = None) -> Path:
    return (home or bootstrap_home()) / LOG_NAME


def config_path(home: Path | None = None) -> Path:
    return (home or bootstrap_home()) / CONFIG_NAME


def atomic_write(path: Path, text: str) -> None:
    """Atomically write UTF-8 text to ``path`` with fsync.

    Creates parent directories as needed. Propagates write errors after
    cleaning up the temporary file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmppath = tempfile.mkstemp(
        prefix=path.name + ".", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError:
                pass
        os.replace(tmppath, path)
    except Exception:
        try:
            os.remove(tmppath)
        except OSError:
            pass
        raise


__all__ = [
    "MARKER_NAME",
    "LOG_NAME",
    "CONFIG_NAME",
    "bootstrap_home",
    "marker_path",
    "log_path",
    "config_path",
    "atomic_write",
]
