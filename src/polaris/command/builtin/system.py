"""Host environment commands — platform, default shell, working directory."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel

from polaris.command.base import BaseCommand, CommandError, CommandOk, CommandResult, NoParams
from polaris.system import get_current_directory, get_platform, get_shell_path


class GetPlatformCommand(BaseCommand[NoParams]):
    name: ClassVar[str] = "get_platform"
    description: ClassVar[str] = "Operating system identifier: windows, linux, macos or unknown."
    param_model: ClassVar[type[BaseModel]] = NoParams

    async def execute(self, params: NoParams) -> CommandResult:
        return CommandOk(value=get_platform())


class GetShellPathCommand(BaseCommand[NoParams]):
    name: ClassVar[str] = "get_shell_path"
    description: ClassVar[str] = "Default shell executable for this platform."
    param_model: ClassVar[type[BaseModel]] = NoParams

    async def execute(self, params: NoParams) -> CommandResult:
        return CommandOk(value=get_shell_path())


class GetCurrentDirectoryCommand(BaseCommand[NoParams]):
    name: ClassVar[str] = "get_current_directory"
    description: ClassVar[str] = "Working directory of the backend process."
    param_model: ClassVar[type[BaseModel]] = NoParams

    async def execute(self, params: NoParams) -> CommandResult:
        try:
            return CommandOk(value=get_current_directory())
        except OSError as e:
            return CommandError(message=str(e))
