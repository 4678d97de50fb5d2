"""Utility helpers shared by the checkers and the prompt setup.

 - Version discovery for the installed package
 - Lightweight HTTP JSON fetch with short timeouts
 - A reachability probe for config URLs
 - A subprocess wrapper returning ``(returncode, stdout, stderr)``

All helpers return benign values instead of raising for network or process
failures; callers decide how loud to be about it.
"""

from __future__ import annotations
import json
import subprocess
import urllib.error
import urllib.request
from typing import List, Optional, Tuple

try:  # pragma: no cover
    from importlib.metadata import PackageNotFoundError, version as pkg_version
except Exception:  # pragma: no cover
    PackageNotFoundError = Exception  # type: ignore

    def pkg_version(_: str) -> str:  # type: ignore
        raise PackageNotFoundError


def get_version() -> str:
    """Return the installed ``profile-bootstrap`` version or ``0.0.0+unknown``."""
    try:
        return pkg_version("profile-bootstrap")
    except Exception:
        return "0.0.0+unknown"


def http_get_json(
    url: str, timeout: float = 3.0
) -> Tuple[Optional[dict], Optional[str]]:
    """Fetch a small JSON document.

    Returns ``(data, None)`` on success; ``(None, message)`` on failure, e.g.
    ``"HTTP 404: Not Found"``.
    """
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            data = json.loads(resp.read().decode("utf-8", errors="ignore"))
    except urllib.error.HTTPError as e:
        return None, f"HTTP {e.code}: {e.reason}"
    except Exception as e:
        return None, str(e)
    if not isinstance(data, dict):
        return None, "unexpected JSON payload"
    return data, None


def probe_url(url: str, timeout: float = 2.0) -> Tuple[bool, str]:
    """Return ``(reachable, detail)`` for ``url`` using a HEAD request.

    Any HTTP status below 400 counts as reachable.
    """
    req = urllib.request.Request(url, method="HEAD")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = getattr(resp, "status", 200)
    except urllib.error.HTTPError as e:
        return False, f"HTTP {e.code}: {e.reason}"
    except Exception as e:
        return False, str(e)
    return status < 400, f"HTTP {status}"


def run_command(
    argv: List[str], timeout: Optional[float] = None, input_text: Optional[str] = None
) -> Tuple[int, str, str]:
    """Run ``argv`` and capture text output.

    Missing executables report return code ``127``, other launch failures
    ``126`` and timeouts ``124``.
    """
    try:
        proc = subprocess.run(
            argv,
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        return 127, "", str(e)
    except OSError as e:
        return 126, "", str(e)
    except subprocess.TimeoutExpired:
        return 124, "", f"timed out after {timeout}s"
    return proc.returncode, proc.stdout or "", proc.stderr or ""


__all__ = [
    "get_version",
    "http_get_json",
    "probe_url",
    "run_command",
    "pkg_version",
    "PackageNotFoundError",
]
