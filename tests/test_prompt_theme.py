import time

import pytest

from profile_bootstrap import environment as env_mod
from profile_bootstrap import prompt_theme
from profile_bootstrap.config import BootstrapConfig
from profile_bootstrap.environment import ShellScript

THEME_URL = "https://themes.example.com/night.omp.json"


@pytest.fixture
def engine(monkeypatch):
    """Pretend oh-my-posh is installed and reachable; record its calls."""
    calls = []
    monkeypatch.setattr(prompt_theme.shutil, "which", lambda name: "/usr/bin/" + name)
    monkeypatch.setattr(prompt_theme, "probe_url", lambda url, timeout=2.0: (True, "HTTP 200"))
    monkeypatch.setattr(
        env_mod, "run_command", lambda argv, timeout=None, input_text=None: (0, "", "")
    )

    def run(argv, timeout=None, input_text=None):
        calls.append(argv)
        return 0, "export POSH_THEME='night'\n", ""

    monkeypatch.setattr(prompt_theme, "run_command", run)
    return calls


def test_no_prompt_config_is_a_no_op():
    script = ShellScript("bash")
    assert prompt_theme.configure_prompt(script, BootstrapConfig()) is None
    assert script.lines == []


def test_successful_init_is_compiled_then_executed(engine):
    script = ShellScript("bash")
    cfg = BootstrapConfig(prompt_config=THEME_URL)
    assert prompt_theme.configure_prompt(script, cfg) is None
    assert engine == [["/usr/bin/oh-my-posh", "init", "bash", "--config", THEME_URL]]
    assert script.lines == ["# oh-my-posh init", "export POSH_THEME='night'"]


def test_unreachable_config_url_is_skipped(engine, monkeypatch, capsys):
    monkeypatch.setattr(prompt_theme, "probe_url", lambda url, timeout=2.0: (False, "timed out"))
    script = ShellScript("bash")
    problem = prompt_theme.configure_prompt(script, BootstrapConfig(prompt_config=THEME_URL))
    assert "unreachable" in problem
    assert engine == []
    assert script.lines == []
    assert "Prompt theming skipped" in capsys.readouterr().err


def test_missing_engine_binary(monkeypatch):
    monkeypatch.setattr(prompt_theme.shutil, "which", lambda name: None)
    script = ShellScript("bash")
    problem = prompt_theme.configure_prompt(script, BootstrapConfig(prompt_config=THEME_URL))
    assert "not found on PATH" in problem


def test_slow_engine_is_abandoned(engine, monkeypatch):
    def slow(argv, timeout=None, input_text=None):
        time.sleep(1)
        return 0, "x=1", ""

    monkeypatch.setattr(prompt_theme, "run_command", slow)
    script = ShellScript("zsh")
    cfg = BootstrapConfig(shell="zsh", prompt_config=THEME_URL, prompt_timeout=0.05)
    start = time.perf_counter()
    problem = prompt_theme.configure_prompt(script, cfg)
    assert time.perf_counter() - start < 0.9
    assert "did not finish" in problem
    assert script.lines == []


def test_uncompilable_output_is_discarded(engine, monkeypatch):
    monkeypatch.setattr(
        env_mod,
        "run_command",
        lambda argv, timeout=None, input_text=None: (2, "", "syntax error: unexpected end of file"),
    )
    script = ShellScript("bash")
    problem = prompt_theme.configure_prompt(script, BootstrapConfig(prompt_config=THEME_URL))
    assert "syntax error" in problem
    assert script.lines == []


def test_engine_failure_exit_code(engine, monkeypatch):
    monkeypatch.setattr(
        prompt_theme,
        "run_command",
        lambda argv, timeout=None, input_text=None: (1, "", "CONFIG ERROR\n"),
    )
    problem = prompt_theme.configure_prompt(
        ShellScript("bash"), BootstrapConfig(prompt_config=THEME_URL)
    )
    assert "exited 1: CONFIG ERROR" in problem


def test_local_config_path(engine, tmp_path):
    theme = tmp_path / "theme.omp.json"
    theme.write_text("{}", encoding="utf-8")
    script = ShellScript("bash")
    assert prompt_theme.configure_prompt(script, BootstrapConfig(prompt_config=str(theme))) is None
    assert engine[0][-1] == str(theme)

    problem = prompt_theme.configure_prompt(
        script, BootstrapConfig(prompt_config=str(tmp_path / "missing.json"))
    )
    assert "not found" in problem
