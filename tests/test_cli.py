"""Tests for the command-line interface."""

import json
import subprocess
import sys

from scicalc_pkg.cli import main_entry
from scicalc_pkg.config import VERSION


def test_cli_version():
    """Test --version flag."""
    result = subprocess.run(
        [sys.executable, "-m", "scicalc_pkg", "--version"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.strip() == VERSION


def test_cli_eval_json():
    """Test CLI evaluation with JSON output."""
    result = subprocess.run(
        [sys.executable, "-m", "scicalc_pkg", "--eval", "8+4", "--format", "json"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["ok"] is True
    assert data["result"] == "12"


def test_eval_human(capsys):
    assert main_entry(["-e", "2^3"]) == 0
    assert capsys.readouterr().out.strip() == "8"


def test_eval_degrees(capsys):
    assert main_entry(["-e", "cos(60)", "--degrees"]) == 0
    assert capsys.readouterr().out.strip() == "0.5"


def test_eval_error_exit_code(capsys):
    assert main_entry(["-e", "5/0", "--format", "json"]) == 1
    data = json.loads(capsys.readouterr().out)
    assert data["ok"] is False
    assert data["error_code"] == "NOT_FINITE"


def test_press_human(capsys):
    assert main_entry(["--press", "9", "x²", "="]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1].strip() == "81"


def test_press_json(capsys):
    assert main_entry(["--press", "3", "0", "sin", "=", "--degrees", "--format", "json"]) == 0
    state = json.loads(capsys.readouterr().out)
    assert state["display"] == "0.5"
    assert state["angle_mode"] == "Deg"
    assert state["is_result"] is True


def test_press_unknown_button(capsys):
    assert main_entry(["--press", "1", "bogus"]) == 1
    assert "Unknown button" in capsys.readouterr().out


def test_repl_quits_on_eof(monkeypatch, capsys):
    inputs = iter(["8 + 4 =", "state"])

    def fake_input(prompt=""):
        try:
            return next(inputs)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    assert main_entry([]) == 0
    out = capsys.readouterr().out
    assert "12" in out
    assert '"display": "12"' in out
