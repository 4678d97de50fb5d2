"""The shell script handed back to the calling shell.

Everything that must take effect in the user's shell (exported variables,
prompt init code, line-editing settings) is collected in a
:class:`ShellScript` and printed once on stdout for ``eval``.

Foreign shell code only enters the script as a :class:`CompiledFragment`,
which is produced by :func:`compile_fragment` after a ``<shell> -n`` syntax
check. Raw strings from other programs are never appended directly.
"""

from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass
from typing import Dict, List, Mapping

from .errors import ConfigError, ScriptCompileError
from .utils import run_command

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
COMPILE_TIMEOUT = 5.0

# readline variable -> zsh equivalent, for the handful that have one
_ZSH_EQUIVALENTS: Dict[str, Dict[str, str]] = {
    "completion-ignore-case": {
        "on": "zstyle ':completion:*' matcher-list 'm:{a-zA-Z}={A-Za-z}'",
    },
    "show-all-if-ambiguous": {"on": "setopt NO_LIST_AMBIGUOUS"},
    "editing-mode": {"vi": "bindkey -v", "emacs": "bindkey -e"},
}


@dataclass(frozen=True)
class CompiledFragment:
    """Shell code that passed a syntax check for ``shell``."""

    shell: str
    source: str
    origin: str = ""


def compile_fragment(
    text: str, shell: str, origin: str = "", timeout: float = COMPILE_TIMEOUT
) -> CompiledFragment:
    """Syntax-check ``text`` with ``shell -n`` without executing it.

    Raises :class:`ScriptCompileError` for empty input, a failed check, or
    when the shell itself cannot be run.
    """
    if not text or not text.strip():
        raise ScriptCompileError(f"{origin or 'fragment'}: empty output")
    code, _out, err_ = run_command([shell, "-n"], timeout=timeout, input_text=text)
    if code != 0:
        detail = err_.strip().splitlines()
        raise ScriptCompileError(
            f"{origin or 'fragment'}: {shell} -n failed ({detail[0] if detail else code})"
        )
    return CompiledFragment(shell=shell, source=text.rstrip("\n"), origin=origin)


class ShellScript:
    """Ordered list of shell statements for one shell flavor."""

    def __init__(self, shell: str):
        self.shell = shell
        self._lines: List[str] = []

    def export(self, name: str, value: str) -> None:
        if not _NAME_RE.match(name):
            raise ConfigError(f"invalid environment variable name {name!r}")
        self._lines.append(f"export {name}={shlex.quote(str(value))}")

    def comment(self, text: str) -> None:
        self._lines.append("# " + text.replace("\n", " "))

    def raw(self, line: str) -> None:
        """Append a statement built by this package (never foreign output)."""
        self._lines.append(line)

    def execute(self, fragment: CompiledFragment) -> None:
        """Include a compiled fragment so the shell runs it on ``eval``."""
        if fragment.shell != self.shell:
            raise ScriptCompileError(
                f"fragment compiled for {fragment.shell}, script is {self.shell}"
            )
        if fragment.origin:
            self.comment(fragment.origin)
        self._lines.append(fragment.source)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def render(self) -> str:
        return "\n".join(self._lines) + ("\n" if self._lines else "")


def export_environment(script: ShellScript, env: Mapping[str, str]) -> List[str]:
    """Export each variable; return messages for the ones rejected."""
    errors = []
    for name, value in env.items():
        try:
            script.export(name, value)
        except ConfigError as e:
            logging.warning("Skipping environment variable: %s", e)
            errors.append(str(e))
    return errors


def configure_line_editing(
    script: ShellScript, settings: Mapping[str, str], history_search: bool = True
) -> None:
    """Append interactive-only line-editing setup for the script's shell."""
    body: List[str] = []
    if script.shell == "zsh":
        for key, value in settings.items():
            stmt = _ZSH_EQUIVALENTS.get(key, {}).get(str(value))
            if stmt:
                body.append(stmt)
            else:
                logging.debug("No zsh equivalent for %s=%s", key, value)
        if history_search:
            body.append("bindkey '^[[A' history-beginning-search-backward")
            body.append("bindkey '^[[B' history-beginning-search-forward")
        guard = "[[ -o interactive ]]"
    else:
        for key, value in settings.items():
            body.append("bind " + shlex.quote(f"set {key} {value}"))
        if history_search:
            body.append("bind '\"\\e[A\": history-search-backward'")
            body.append("bind '\"\\e[B\": history-search-forward'")
        guard = "[[ $- == *i* ]]"
    if not body:
        return
    script.raw(f"if {guard}; then")
    for stmt in body:
        script.raw("  " + stmt)
    script.raw("fi")


__all__ = [
    "CompiledFragment",
    "compile_fragment",
    "ShellScript",
    "export_environment",
    "configure_line_editing",
]
