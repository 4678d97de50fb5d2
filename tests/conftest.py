import logging

import pytest


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("PROFILE_BOOTSTRAP_HOME", str(tmp_path / "home"))
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, "_added_by_configure_logging", False):
            root.removeHandler(h)
            h.close()
    root.setLevel(logging.WARNING)
