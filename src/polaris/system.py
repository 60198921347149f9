"""Host environment queries used by the terminal panel."""

from __future__ import annotations

import os
import sys

PLATFORMS = ("windows", "linux", "macos", "unknown")

_WINDOWS_POWERSHELL = r"C:\Windows\System32\WindowsPowerShell\v1.0\powershell.exe"


def get_platform() -> str:
    """Return one of ``PLATFORMS`` for the running interpreter."""
    if sys.platform == "win32":
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    return "unknown"


def get_shell_path() -> str:
    """Default shell executable for the current platform and environment.

    Windows prefers PowerShell when installed. Elsewhere ``$SHELL`` wins,
    then the platform's stock shell.
    """
    platform = get_platform()
    if platform == "windows":
        if os.path.exists(_WINDOWS_POWERSHELL):
            return "powershell.exe"
        return "cmd.exe"

    shell = os.environ.get("SHELL")
    if shell:
        return shell
    if platform == "linux":
        return "/bin/bash"
    if platform == "macos":
        return "/bin/zsh"
    return "/bin/sh"


def get_current_directory() -> str:
    """Current working directory of the backend process.

    Raises:
        OSError: The directory was removed or is not accessible.
    """
    return os.getcwd()
