import importlib
import importlib.util
import sys
from pathlib import Path


def load_launcher():
    spec = importlib.util.spec_from_file_location(
        "profile_bootstrap_launcher",
        Path(__file__).resolve().parents[1] / "profile-bootstrap.py",
    )
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_launcher_exposes_package_main():
    launcher = load_launcher()
    main_flow = importlib.import_module("profile_bootstrap.main_flow")
    assert launcher.main is main_flow.main


def test_package_main_is_main_flow_main():
    pkg = importlib.import_module("profile_bootstrap")
    main_flow = importlib.import_module("profile_bootstrap.main_flow")
    assert pkg.main is main_flow.main


def test_exports_are_public_and_resolve():
    for name in ("ui", "runner", "config", "logging_utils", "updatesets.sources"):
        module = importlib.import_module(f"profile_bootstrap.{name}")
        for attr in module.__all__:
            assert not attr.startswith("_"), (name, attr)
            assert hasattr(module, attr), (name, attr)
