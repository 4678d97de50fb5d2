"""Background execution with bounded waits.

Two shapes are provided:
 - :func:`run_async` starts both update checkers at once and returns a
   :class:`CheckHandle`; :func:`await_results` waits for the pair with a
   timeout and returns ``None`` when they are not ready yet.
 - :func:`launch` starts one callable and returns a :class:`BackgroundTask`
   for the same timeout-then-abandon pattern (used by prompt setup).

Work runs on daemon threads feeding ``concurrent.futures.Future`` objects,
so interpreter exit never waits on an abandoned call. Jobs receive plain
values captured at launch and return plain values; nothing is shared with the
caller while they run.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from .logging_utils import log_event
from .updatesets.types import UpdateResult

DEFAULT_TIMEOUT = 5.0


def _spawn(fn: Callable[..., Any], args: Tuple, name: str) -> concurrent.futures.Future:
    fut: concurrent.futures.Future = concurrent.futures.Future()

    def worker():
        if not fut.set_running_or_notify_cancel():
            return
        try:
            fut.set_result(fn(*args))
        except BaseException as exc:
            fut.set_exception(exc)

    threading.Thread(target=worker, name=name, daemon=True).start()
    return fut


@dataclass(frozen=True)
class CheckJob:
    """A checker call frozen at launch: ``fn(*args)`` -> ``UpdateResult``."""

    checker: str
    fn: Callable[..., UpdateResult]
    args: Tuple = ()

    def run(self) -> UpdateResult:
        try:
            return self.fn(*self.args)
        except Exception as exc:
            logging.info("%s checker failed: %s", self.checker, exc)
            return UpdateResult.failed(self.checker, str(exc))


class CheckHandle:
    """Outstanding dual update check. Release exactly once."""

    def __init__(self, futures: Tuple[concurrent.futures.Future, concurrent.futures.Future]):
        self._futures = futures
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop interest in the results. Running work is left to finish."""
        if self._released:
            return
        self._released = True
        pending = sum(1 for f in self._futures if not f.done())
        for f in self._futures:
            f.cancel()
        log_event("check_handle_released", abandoned=pending)

    def __enter__(self) -> "CheckHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.release()


def run_async(job_a: CheckJob, job_b: CheckJob) -> CheckHandle:
    """Start both jobs in the background and return immediately."""
    futures = (
        _spawn(job_a.run, (), f"profile-check-{job_a.checker}"),
        _spawn(job_b.run, (), f"profile-check-{job_b.checker}"),
    )
    log_event("update_check_launched", checkers=f"{job_a.checker},{job_b.checker}")
    return CheckHandle(futures)


def await_results(
    handle: CheckHandle, timeout: float = DEFAULT_TIMEOUT
) -> Optional[Tuple[UpdateResult, UpdateResult]]:
    """Wait up to ``timeout`` seconds for both results.

    Returns ``None`` when the results are not ready in time or the handle was
    already released. Never raises.
    """
    if handle.released:
        return None
    done, not_done = concurrent.futures.wait(handle._futures, timeout=max(timeout, 0))
    if not_done:
        logging.info("Update check not ready after %ss; results discarded", timeout)
        return None
    try:
        first, second = handle._futures
        return first.result(), second.result()
    except concurrent.futures.CancelledError:
        return None


class BackgroundTask:
    """A single background call with a bounded wait."""

    def __init__(self, future: concurrent.futures.Future, label: str):
        self._future = future
        self.label = label

    def wait(self, timeout: float = DEFAULT_TIMEOUT) -> Tuple[bool, Any]:
        """Return ``(True, value)`` when finished in time, else ``(False, None)``.

        Exceptions raised by the call are re-raised here.
        """
        try:
            value = self._future.result(timeout=max(timeout, 0))
        except concurrent.futures.TimeoutError:
            logging.info("%s not finished after %ss; abandoned", self.label, timeout)
            self._future.cancel()
            return False, None
        return True, value


def launch(fn: Callable[..., Any], *args: Any, label: str = "task") -> BackgroundTask:
    return BackgroundTask(_spawn(fn, args, f"profile-{label}"), label)


__all__ = [
    "DEFAULT_TIMEOUT",
    "CheckJob",
    "CheckHandle",
    "run_async",
    "await_results",
    "BackgroundTask",
    "launch",
]
