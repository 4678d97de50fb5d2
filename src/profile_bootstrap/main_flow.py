from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .args import parse_args
from .bootstrap import run_bootstrap, run_checks_now
from .config import BootstrapConfig
from .io_safe import bootstrap_home, config_path, log_path
from .logging_utils import configure_logging, log_event
from .ui import err, warn
from .updatesets import log_results, report_results
from .utils import get_version


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Writes the startup script to stdout and returns 0.

    Failures are logged and reported on stderr; the only non-zero exit is
    ``130`` on Ctrl-C. A usage error is printed by argparse and also exits
    ``0`` with nothing on stdout, so ``eval`` in an rc file stays harmless.
    """
    try:
        args = parse_args(argv)
    except SystemExit:
        return 0
    if args.version:
        print(get_version())
        return 0
    try:
        return _run(args)
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        logging.exception("profile-bootstrap failed")
        err(f"profile-bootstrap failed: {exc}")
        return 0


def _run(args) -> int:
    home = bootstrap_home()
    log_file = None if args.no_log_file else (args.log_file or str(log_path(home)))
    configure_logging(args.verbose, log_file, args.log_level)

    cfg_path = Path(args.config).expanduser() if args.config else config_path(home)
    config = BootstrapConfig.load(
        cfg_path, shell=args.shell, check_timeout=args.timeout
    )
    log_event("bootstrap_start", config=str(cfg_path), shell=config.shell)

    if args.check_only:
        results = run_checks_now(config)
        log_results(results, forced=True)
        report_results(results, verbose=True)
        return 0

    report = run_bootstrap(
        config,
        home,
        force_check=args.force_check,
        no_update_check=args.no_update_check,
        verbose=args.verbose,
    )
    sys.stdout.write(report.script.render())
    sys.stdout.flush()
    if args.verbose:
        for e in report.errors:
            warn(e)
    return 0


__all__ = ["main"]
