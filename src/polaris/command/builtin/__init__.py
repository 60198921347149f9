"""Built-in commands exposed to the editor front end."""

from __future__ import annotations

from typing import TYPE_CHECKING

from polaris.command.builtin.execute import ExecuteCommand
from polaris.command.builtin.system import (
    GetCurrentDirectoryCommand,
    GetPlatformCommand,
    GetShellPathCommand,
)
from polaris.command.builtin.terminal import (
    CreatePtyCommand,
    KillPtyCommand,
    ResizePtyCommand,
    StartPtyStreamCommand,
    WritePtyCommand,
)
from polaris.command.registry import CommandRegistry

if TYPE_CHECKING:
    from polaris.config import RunnerConfig
    from polaris.pty.manager import TerminalManager

__all__ = [
    "CreatePtyCommand",
    "ExecuteCommand",
    "GetCurrentDirectoryCommand",
    "GetPlatformCommand",
    "GetShellPathCommand",
    "KillPtyCommand",
    "ResizePtyCommand",
    "StartPtyStreamCommand",
    "WritePtyCommand",
    "build_command_registry",
]


def build_command_registry(
    manager: TerminalManager, runner: RunnerConfig | None = None
) -> CommandRegistry:
    """Registry with every built-in command bound to ``manager``."""
    registry = CommandRegistry()
    registry.register_many(
        [
            GetPlatformCommand(),
            GetShellPathCommand(),
            GetCurrentDirectoryCommand(),
            CreatePtyCommand(manager),
            StartPtyStreamCommand(manager),
            WritePtyCommand(manager),
            ResizePtyCommand(manager),
            KillPtyCommand(manager),
            ExecuteCommand(timeout=runner.timeout if runner else None),
        ]
    )
    return registry
