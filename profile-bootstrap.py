#!/usr/bin/env python3
"""Launcher for running profile-bootstrap straight from a checkout.

Lets a dotfiles repo call ``python3 ~/src/profile-bootstrap/profile-bootstrap.py``
from a shell rc file without installing the package:
 - Prefer a normal import when the package is installed.
 - Otherwise put ``./src`` on ``sys.path`` and import from there.
"""

import importlib
import sys
from pathlib import Path


def _load_main():
    try:
        from profile_bootstrap import main as _main  # type: ignore

        return _main
    except ImportError:
        pass

    _src = Path(__file__).resolve().parent / "src"
    if _src.exists() and str(_src) not in sys.path:
        sys.path.insert(0, str(_src))
    return importlib.import_module("profile_bootstrap").main


main = _load_main()


if __name__ == "__main__":
    sys.exit(main())
