"""Argument parsing.

The default action prints the startup script, so the usual invocation is a
bare ``profile-bootstrap --shell bash`` inside ``eval "$(...)"``.
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from .config import SUPPORTED_SHELLS


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments (defaults to ``sys.argv[1:]``)."""
    epilog = (
        "Startup usage:\n"
        '  bash: eval "$(profile-bootstrap --shell bash)"   # in ~/.bashrc\n'
        '  zsh:  eval "$(profile-bootstrap --shell zsh)"    # in ~/.zshrc\n'
    )
    p = argparse.ArgumentParser(
        prog="profile-bootstrap",
        description="Shell startup bootstrapper: daily update check, installs, prompt and line editing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument(
        "-s", "--shell", choices=SUPPORTED_SHELLS, help="Shell to emit code for"
    )
    p.add_argument("-c", "--config", help="Path to a JSON config file")

    checks = p.add_argument_group("Update checks")
    checks.add_argument(
        "-F",
        "--force-check",
        action="store_true",
        help="Check for updates even if a check already ran today",
    )
    checks.add_argument(
        "-N",
        "--no-update-check",
        action="store_true",
        help="Skip update checks and installs for this run",
    )
    checks.add_argument(
        "-C",
        "--check-only",
        action="store_true",
        help="Run both update checks in the foreground, print a report and exit",
    )
    checks.add_argument(
        "-t",
        "--timeout",
        type=float,
        help="Seconds to wait for background update checks",
    )

    logs = p.add_argument_group("Logging")
    logs.add_argument(
        "-v", "--verbose", action="store_true", help="Enable INFO/DEBUG logging"
    )
    logs.add_argument(
        "-ll",
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Explicit log level (overrides --verbose)",
    )
    logs.add_argument("-f", "--log-file", help="Log file (default: <home>/bootstrap.log)")
    logs.add_argument(
        "--no-log-file", action="store_true", help="Do not write a log file"
    )
    p.add_argument("-V", "--version", action="store_true", help="Print version and exit")

    if argv is None:
        argv = sys.argv[1:]
    ns = p.parse_args(argv)
    if ns.timeout is not None and ns.timeout < 0:
        p.error("--timeout must be non-negative")
    return ns


__all__ = ["parse_args"]
