"""Prompt theming setup (oh-my-posh style engines).

The engine is asked for its init code with ``<binary> init <shell> --config
<location>``. Its stdout is shell code, which goes through
:func:`~profile_bootstrap.environment.compile_fragment` before it is added to
the evaluated script.

The engine may fetch a remote config, so the location is probed first and the
init call runs in the background with a bounded wait. A slow engine is
abandoned and the shell starts with its default prompt.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .config import BootstrapConfig
from .environment import ShellScript, compile_fragment
from .errors import BootstrapError, QueryError
from .logging_utils import log_event
from .runner import launch
from .ui import warn
from .utils import probe_url, run_command

PROBE_TIMEOUT = 2.0
# upper bound for an abandoned engine process
ENGINE_HARD_TIMEOUT = 60.0


def is_url(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def check_config_location(location: str, timeout: float = PROBE_TIMEOUT) -> str:
    """Return the location to pass to the engine or raise :class:`QueryError`."""
    if is_url(location):
        reachable, detail = probe_url(location, timeout=timeout)
        if not reachable:
            raise QueryError(f"prompt config {location} unreachable ({detail})")
        return location
    path = Path(location).expanduser()
    if not path.is_file():
        raise QueryError(f"prompt config {path} not found")
    return str(path)


def init_prompt(script: ShellScript, config: BootstrapConfig) -> None:
    """Run the engine's init and add its compiled output to ``script``.

    Raises a :class:`~profile_bootstrap.errors.BootstrapError` subclass when
    any stage fails or times out.
    """
    binary = shutil.which(config.prompt_binary)
    if not binary:
        raise QueryError(f"{config.prompt_binary} not found on PATH")
    location = check_config_location(
        config.prompt_config, timeout=min(PROBE_TIMEOUT, config.prompt_timeout)
    )
    argv = [binary, "init", script.shell, "--config", location]
    task = launch(run_command, argv, ENGINE_HARD_TIMEOUT, label="prompt-init")
    ready, value = task.wait(config.prompt_timeout)
    if not ready:
        raise QueryError(
            f"{config.prompt_binary} init did not finish within {config.prompt_timeout}s"
        )
    code, out, err_ = value
    if code != 0:
        detail = err_.strip().splitlines()
        raise QueryError(
            f"{config.prompt_binary} init exited {code}: {detail[-1] if detail else 'no output'}"
        )
    script.execute(compile_fragment(out, script.shell, origin=f"{config.prompt_binary} init"))


def configure_prompt(script: ShellScript, config: BootstrapConfig) -> Optional[str]:
    """Best-effort prompt setup. Returns a failure message, or ``None``."""
    if not config.prompt_config:
        logging.debug("No prompt config set; keeping the default prompt")
        return None
    try:
        init_prompt(script, config)
    except BootstrapError as e:
        logging.info("Prompt theming skipped: %s", e)
        warn(f"Prompt theming skipped: {e}")
        log_event("prompt_init_skipped", error=str(e))
        return str(e)
    log_event("prompt_init_done", binary=config.prompt_binary)
    return None


__all__ = [
    "PROBE_TIMEOUT",
    "ENGINE_HARD_TIMEOUT",
    "is_url",
    "check_config_location",
    "init_prompt",
    "configure_prompt",
]
