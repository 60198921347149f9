"""Command registry — register and dispatch front-end commands by name."""

from __future__ import annotations

import logging
from typing import Any

from polaris.command.base import BaseCommand, CommandError, CommandResult

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Registry of commands the editor can invoke."""

    def __init__(self) -> None:
        self._commands: dict[str, BaseCommand] = {}

    def register(self, command: BaseCommand) -> None:
        """Register a command instance."""
        if command.name in self._commands:
            logger.warning("Command %s already registered, overwriting", command.name)
        self._commands[command.name] = command

    def register_many(self, commands: list[BaseCommand]) -> None:
        for command in commands:
            self.register(command)

    def names(self) -> list[str]:
        """Get all registered command names."""
        return list(self._commands.keys())

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> CommandResult:
        """Invoke a command by name.

        Returns:
            The command's result; unknown names give a ``CommandError``.
        """
        command = self._commands.get(name)
        if command is None:
            return CommandError(
                message=f"Unknown command: {name}. Available commands: {', '.join(self.names())}"
            )
        return await command(arguments or {})

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands
