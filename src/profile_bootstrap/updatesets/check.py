from __future__ import annotations

import logging
from typing import Callable, Iterable

from ..logging_utils import log_event
from .types import UpdateEntry, UpdateResult, UpdateTarget, VersionProbe

QueryFn = Callable[[UpdateTarget], VersionProbe]


def check_updates(
    checker: str, targets: Iterable[UpdateTarget], query_fn: QueryFn
) -> UpdateResult:
    """Compare installed and available versions for each target.

    Targets are checked in input order and each distinct target at most once.
    A target that is not installed, or whose query raises, is skipped with a
    warning. Any mismatch between installed and available counts as an
    update; no version ordering is applied.

    If every target's query failed the result carries an ``error`` as well,
    since that usually means the source itself is down.
    """
    result = UpdateResult(checker=checker)
    seen = set()
    queried = 0
    failed = 0
    for target in targets:
        if target in seen:
            continue
        seen.add(target)
        queried += 1
        try:
            probe = query_fn(target)
        except Exception as exc:
            failed += 1
            msg = f"{target.name}: query failed ({exc})"
            result.warnings.append(msg)
            logging.info("%s checker: %s", checker, msg)
            continue
        if probe.installed is None:
            msg = f"{target.name}: not installed, skipped"
            result.warnings.append(msg)
            logging.info("%s checker: %s", checker, msg)
            continue
        if _differs(probe):
            result.entries.append(
                UpdateEntry(
                    name=target.name,
                    reason=f"{probe.installed.strip()} -> {probe.available.strip()}",
                    installed=probe.installed.strip(),
                    available=probe.available.strip(),
                )
            )
    if queried and failed == queried:
        result.error = "all queries failed"
    log_event(
        "update_check_done",
        checker=checker,
        targets=queried,
        updates=len(result.entries),
        skipped=len(result.warnings),
    )
    return result


def _differs(probe: VersionProbe) -> bool:
    if probe.available is None or probe.installed is None:
        return False
    return probe.installed.strip() != probe.available.strip()


__all__ = ["check_updates", "QueryFn"]
