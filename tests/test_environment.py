import shutil

import pytest

from profile_bootstrap import environment as env_mod
from profile_bootstrap.environment import (
    CompiledFragment,
    ShellScript,
    compile_fragment,
    configure_line_editing,
    export_environment,
)
from profile_bootstrap.errors import ConfigError, ScriptCompileError


def test_exports_are_quoted():
    script = ShellScript("bash")
    script.export("TENANT_URL", "https://tenant.example.com")
    script.export("DATABASE_NAME", "prod db'; rm -rf ~")
    assert script.lines == [
        "export TENANT_URL=https://tenant.example.com",
        "export DATABASE_NAME='prod db'\"'\"'; rm -rf ~'",
    ]


def test_invalid_names_are_rejected_but_others_exported():
    script = ShellScript("bash")
    with pytest.raises(ConfigError):
        script.export("BAD-NAME", "x")
    errors = export_environment(script, {"1ST": "x", "INSTANCE": "eu-2"})
    assert len(errors) == 1
    assert script.render() == "export INSTANCE=eu-2\n"


def test_compile_fragment_runs_syntax_check(monkeypatch):
    seen = {}

    def run(argv, timeout=None, input_text=None):
        seen["argv"] = argv
        seen["input"] = input_text
        return 0, "", ""

    monkeypatch.setattr(env_mod, "run_command", run)
    frag = compile_fragment("export POSH_THEME=x\n", "zsh", origin="oh-my-posh init")
    assert seen["argv"] == ["zsh", "-n"]
    assert seen["input"] == "export POSH_THEME=x\n"
    assert frag == CompiledFragment("zsh", "export POSH_THEME=x", "oh-my-posh init")


def test_compile_fragment_rejects_bad_or_empty_output(monkeypatch):
    monkeypatch.setattr(
        env_mod,
        "run_command",
        lambda argv, timeout=None, input_text=None: (2, "", "bash: line 1: syntax error near `)'"),
    )
    with pytest.raises(ScriptCompileError, match="syntax error"):
        compile_fragment("echo )", "bash")
    with pytest.raises(ScriptCompileError, match="empty"):
        compile_fragment("   \n", "bash")


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")
def test_compile_fragment_with_real_bash():
    frag = compile_fragment('PS1="\\u@\\h $ "\n', "bash")
    assert frag.source == 'PS1="\\u@\\h $ "'
    with pytest.raises(ScriptCompileError):
        compile_fragment("if then fi (", "bash")


def test_execute_includes_fragment_with_origin():
    script = ShellScript("bash")
    script.execute(CompiledFragment("bash", "eval_me=1", "engine init"))
    assert script.lines == ["# engine init", "eval_me=1"]
    with pytest.raises(ScriptCompileError):
        script.execute(CompiledFragment("zsh", "x=1"))


def test_bash_line_editing():
    script = ShellScript("bash")
    configure_line_editing(script, {"completion-ignore-case": "on"}, history_search=True)
    assert script.lines == [
        "if [[ $- == *i* ]]; then",
        "  bind 'set completion-ignore-case on'",
        "  bind '\"\\e[A\": history-search-backward'",
        "  bind '\"\\e[B\": history-search-forward'",
        "fi",
    ]


def test_zsh_line_editing_maps_known_settings():
    script = ShellScript("zsh")
    configure_line_editing(
        script, {"editing-mode": "vi", "colored-stats": "on"}, history_search=False
    )
    assert script.lines == ["if [[ -o interactive ]]; then", "  bindkey -v", "fi"]


def test_line_editing_without_settings_adds_nothing():
    script = ShellScript("bash")
    configure_line_editing(script, {}, history_search=False)
    assert script.render() == ""
