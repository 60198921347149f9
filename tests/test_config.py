"""Tests for polaris.config (PolarisConfig.load)."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from polaris.config import PolarisConfig, TerminalConfig

_ENV_VARS = (
    "POLARIS_SHELL",
    "POLARIS_BACKEND",
    "POLARIS_TERM",
    "POLARIS_ROWS",
    "POLARIS_COLS",
    "POLARIS_RUNNER_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working tree out of these tests
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_terminal_defaults(self) -> None:
        cfg = TerminalConfig()
        assert cfg.backend == "auto"
        assert cfg.shell is None
        assert (cfg.rows, cfg.cols) == (24, 80)
        assert cfg.read_chunk_size == 8192
        assert cfg.idle_sleep == pytest.approx(0.01)
        assert cfg.carry_partial_utf8 is True

    def test_load_without_file(self) -> None:
        cfg = PolarisConfig.load()
        assert cfg.terminal == TerminalConfig()
        assert cfg.runner.timeout is None

    def test_missing_file_ignored(self, tmp_path) -> None:
        cfg = PolarisConfig.load(str(tmp_path / "nope.json"))
        assert cfg.terminal.backend == "auto"


class TestFileAndEnv:
    def test_file_values(self, tmp_path) -> None:
        path = tmp_path / "polaris.json"
        path.write_text(json.dumps({"terminal": {"backend": "pipe", "cols": 120}}))
        cfg = PolarisConfig.load(str(path))
        assert cfg.terminal.backend == "pipe"
        assert cfg.terminal.cols == 120

    def test_env_overrides_file(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "polaris.json"
        path.write_text(json.dumps({"terminal": {"backend": "pipe", "shell": "/bin/sh"}}))
        monkeypatch.setenv("POLARIS_BACKEND", "PTY")
        monkeypatch.setenv("POLARIS_SHELL", "/bin/zsh")
        cfg = PolarisConfig.load(str(path))
        assert cfg.terminal.backend == "pty"
        assert cfg.terminal.shell == "/bin/zsh"

    def test_env_numbers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLARIS_ROWS", "50")
        monkeypatch.setenv("POLARIS_COLS", "200")
        monkeypatch.setenv("POLARIS_TERM", "vt100")
        monkeypatch.setenv("POLARIS_RUNNER_TIMEOUT", "2.5")
        cfg = PolarisConfig.load()
        assert (cfg.terminal.rows, cfg.terminal.cols) == (50, 200)
        assert cfg.terminal.term == "vt100"
        assert cfg.runner.timeout == pytest.approx(2.5)

    def test_invalid_backend_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POLARIS_BACKEND", "telnet")
        with pytest.raises(ValidationError):
            PolarisConfig.load()
