"""execute_command — one-shot command bar runner."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field

from polaris.command.base import BaseCommand, CommandError, CommandOk, CommandResult
from polaris.runner import CommandFailed, execute_command


class ExecuteParams(BaseModel):
    command: str = Field(description="Full command line, e.g. 'ls -la' or 'help'.")


class ExecuteCommand(BaseCommand[ExecuteParams]):
    """Run a command once and return its captured output.

    ``help``, ``clear`` and ``echo`` are answered without a shell.
    """

    name: ClassVar[str] = "execute_command"
    description: ClassVar[str] = "Run a one-shot command and return its standard output."
    param_model: ClassVar[type[BaseModel]] = ExecuteParams

    def __init__(self, cwd: str | None = None, timeout: float | None = None) -> None:
        self._cwd = cwd
        self._timeout = timeout

    async def execute(self, params: ExecuteParams) -> CommandResult:
        try:
            output = await execute_command(params.command, cwd=self._cwd, timeout=self._timeout)
        except CommandFailed as e:
            return CommandError(message=f"Failed to execute command: {e}")
        return CommandOk(value=output)
