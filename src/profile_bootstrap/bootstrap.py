"""The bootstrap sequence run at every shell startup.

States are visited in a fixed order::

    INIT -> GATE -> SYNC_INSTALL -> CONFIGURE -> RECONCILE -> READY

``SYNC_INSTALL`` is skipped when the gate says today's maintenance already
ran. Every step catches its own failures and records them in the report, so
the sequence always reaches ``READY`` and the shell always gets a script.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .config import BootstrapConfig
from .environment import ShellScript, configure_line_editing, export_environment
from .gate import LastRunGate
from .installer import install_missing
from .io_safe import marker_path
from .logging_utils import log_event
from .prompt_theme import configure_prompt
from .runner import CheckHandle, CheckJob, await_results, run_async
from .ui import info
from .updatesets import (
    MODULE_CHECKER,
    PACKAGE_CHECKER,
    UpdateResult,
    check_modules,
    check_packages,
    log_results,
    report_results,
)

# caps for subprocess/HTTP calls that may outlive the bounded wait
PACKAGE_QUERY_TIMEOUT = 120.0
REGISTRY_QUERY_TIMEOUT = 3.0


class BootstrapState(enum.Enum):
    INIT = "init"
    GATE = "gate"
    SYNC_INSTALL = "sync_install"
    CONFIGURE = "configure"
    RECONCILE = "reconcile"
    READY = "ready"


@dataclass
class BootstrapReport:
    """What a bootstrap run did. ``script`` is what the shell evaluates."""

    script: ShellScript
    states: List[BootstrapState] = field(default_factory=list)
    skipped_today: Optional[bool] = None
    results: Optional[Tuple[UpdateResult, UpdateResult]] = None
    installed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def state(self) -> Optional[BootstrapState]:
        return self.states[-1] if self.states else None

    @property
    def ready(self) -> bool:
        return self.state is BootstrapState.READY

    def fail(self, state: BootstrapState, message: str) -> None:
        self.errors.append(f"{state.value}: {message}")


def _disabled(checker: str, reason: str) -> UpdateResult:
    return UpdateResult.failed(checker, reason)


def build_jobs(config: BootstrapConfig) -> Tuple[CheckJob, CheckJob]:
    """Snapshot the two checkers with everything they need as plain values."""
    if config.package_targets is None:
        pkg_job = CheckJob(
            PACKAGE_CHECKER, _disabled, (PACKAGE_CHECKER, "invalid package target configuration")
        )
    else:
        pkg_job = CheckJob(
            PACKAGE_CHECKER,
            check_packages,
            (tuple(config.package_targets), config.package_manager, PACKAGE_QUERY_TIMEOUT),
        )
    if config.module_targets is None:
        mod_job = CheckJob(
            MODULE_CHECKER, _disabled, (MODULE_CHECKER, "invalid module target configuration")
        )
    else:
        mod_job = CheckJob(
            MODULE_CHECKER,
            check_modules,
            (tuple(config.module_targets), dict(config.repositories), REGISTRY_QUERY_TIMEOUT),
        )
    return pkg_job, mod_job


def run_checks_now(config: BootstrapConfig) -> Tuple[UpdateResult, UpdateResult]:
    """Run both checkers in the foreground (``--check-only``)."""
    pkg_job, mod_job = build_jobs(config)
    return pkg_job.run(), mod_job.run()


def _guarded(report: BootstrapReport, state: BootstrapState, step: Callable[[], None]) -> None:
    try:
        step()
    except Exception as exc:
        logging.exception("Bootstrap step %s failed", state.value)
        report.fail(state, str(exc))


def run_bootstrap(
    config: BootstrapConfig,
    home: Optional[Path] = None,
    *,
    force_check: bool = False,
    no_update_check: bool = False,
    verbose: bool = False,
    gate: Optional[LastRunGate] = None,
) -> BootstrapReport:
    """Run the whole sequence and return its report. Never raises."""
    report = BootstrapReport(script=ShellScript(config.shell))
    handle: Optional[CheckHandle] = None

    report.states.append(BootstrapState.INIT)
    for e in config.errors:
        report.fail(BootstrapState.INIT, e)

    report.states.append(BootstrapState.GATE)
    if no_update_check:
        report.skipped_today = True
    elif force_check:
        report.skipped_today = False
    else:
        gate = gate or LastRunGate(marker_path(home))
        try:
            report.skipped_today = gate.should_skip_today()
        except Exception as exc:
            logging.exception("Last-run gate failed")
            report.fail(BootstrapState.GATE, str(exc))
            report.skipped_today = False
    if not report.skipped_today:
        try:
            handle = run_async(*build_jobs(config))
        except Exception as exc:
            logging.exception("Could not launch update checks")
            report.fail(BootstrapState.GATE, str(exc))
    log_event("gate_decision", skipped=report.skipped_today, launched=handle is not None)

    try:
        if not report.skipped_today:
            report.states.append(BootstrapState.SYNC_INSTALL)

            def install() -> None:
                installed, failures = install_missing(config.required_modules)
                report.installed.extend(installed)
                for f in failures:
                    report.fail(BootstrapState.SYNC_INSTALL, f)

            _guarded(report, BootstrapState.SYNC_INSTALL, install)

        report.states.append(BootstrapState.CONFIGURE)
        script = report.script

        def environment() -> None:
            for e in export_environment(script, config.environment):
                report.fail(BootstrapState.CONFIGURE, e)

        def prompt() -> None:
            problem = configure_prompt(script, config)
            if problem:
                report.fail(BootstrapState.CONFIGURE, problem)

        def line_editing() -> None:
            configure_line_editing(script, config.line_editing, config.history_search)

        for step in (environment, prompt, line_editing):
            _guarded(report, BootstrapState.CONFIGURE, step)

        report.states.append(BootstrapState.RECONCILE)
        if handle is not None:
            _guarded(
                report,
                BootstrapState.RECONCILE,
                lambda: _reconcile(report, handle, config.check_timeout, verbose),
            )
    finally:
        if handle is not None:
            handle.release()

    report.states.append(BootstrapState.READY)
    log_event("bootstrap_ready", errors=len(report.errors))
    return report


def _reconcile(
    report: BootstrapReport, handle: CheckHandle, timeout: float, verbose: bool
) -> None:
    results = await_results(handle, timeout)
    if results is None:
        if verbose:
            info("Update check still running; will try again tomorrow.")
        log_event("update_check_not_ready", timeout=timeout)
        return
    report.results = results
    log_results(results, forced=False)
    report_results(results, verbose=verbose)


__all__ = [
    "BootstrapState",
    "BootstrapReport",
    "build_jobs",
    "run_checks_now",
    "run_bootstrap",
    "PACKAGE_QUERY_TIMEOUT",
    "REGISTRY_QUERY_TIMEOUT",
]
