"""Tests for polaris.system (platform name, default shell, cwd)."""

from __future__ import annotations

import os

import pytest

from polaris import system


class TestGetPlatform:
    @pytest.mark.parametrize(
        "sys_platform,expected",
        [
            ("win32", "windows"),
            ("linux", "linux"),
            ("darwin", "macos"),
            ("freebsd14", "unknown"),
        ],
    )
    def test_mapping(self, monkeypatch: pytest.MonkeyPatch, sys_platform: str, expected: str) -> None:
        monkeypatch.setattr(system.sys, "platform", sys_platform)
        assert system.get_platform() == expected

    def test_current_is_known_value(self) -> None:
        assert system.get_platform() in system.PLATFORMS


class TestGetShellPath:
    def test_shell_env_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(system, "get_platform", lambda: "linux")
        monkeypatch.setenv("SHELL", "/usr/bin/fish")
        assert system.get_shell_path() == "/usr/bin/fish"

    @pytest.mark.parametrize(
        "platform,expected",
        [("linux", "/bin/bash"), ("macos", "/bin/zsh"), ("unknown", "/bin/sh")],
    )
    def test_fallbacks(self, monkeypatch: pytest.MonkeyPatch, platform: str, expected: str) -> None:
        monkeypatch.setattr(system, "get_platform", lambda: platform)
        monkeypatch.delenv("SHELL", raising=False)
        assert system.get_shell_path() == expected

    def test_empty_shell_env_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(system, "get_platform", lambda: "linux")
        monkeypatch.setenv("SHELL", "")
        assert system.get_shell_path() == "/bin/bash"

    @pytest.mark.parametrize("has_powershell,expected", [(True, "powershell.exe"), (False, "cmd.exe")])
    def test_windows(
        self, monkeypatch: pytest.MonkeyPatch, has_powershell: bool, expected: str
    ) -> None:
        monkeypatch.setattr(system, "get_platform", lambda: "windows")
        monkeypatch.setattr(system.os.path, "exists", lambda path: has_powershell)
        assert system.get_shell_path() == expected


def test_current_directory(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    assert os.path.samefile(system.get_current_directory(), tmp_path)
