"""Shell startup bootstrapper.

``eval "$(profile-bootstrap --shell bash)"`` runs a once-a-day update check in
the background, installs missing modules, and prints the exports, prompt init
and line-editing setup for the calling shell.
"""

from .main_flow import main

__all__ = ["main"]
