"""Terminal session commands — create, stream, write, resize, kill.

Thin adapters over ``TerminalManager``: they validate arguments and turn
``TerminalError`` into short error messages for the UI.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, Field

from polaris.command.base import BaseCommand, CommandOk, CommandResult

if TYPE_CHECKING:
    from polaris.pty.manager import TerminalManager

_U16 = {"ge": 0, "le": 0xFFFF}


class CreateParams(BaseModel):
    shell: str | None = Field(default=None, description="Shell executable. Defaults to the platform shell.")
    cwd: str | None = Field(default=None, description="Working directory. Defaults to the current directory.")


class SessionParams(BaseModel):
    pty_id: int = Field(ge=0, description="Session id returned by create_pty.")


class WriteParams(SessionParams):
    data: str = Field(description="Raw input, control characters included.")


class ResizeParams(SessionParams):
    cols: int = Field(description="Columns.", **_U16)
    rows: int = Field(description="Rows.", **_U16)


class _TerminalCommand:
    def __init__(self, manager: TerminalManager) -> None:
        self._manager = manager


class CreatePtyCommand(_TerminalCommand, BaseCommand[CreateParams]):
    name: ClassVar[str] = "create_pty"
    description: ClassVar[str] = "Spawn a shell session and return its id."
    param_model: ClassVar[type[BaseModel]] = CreateParams

    async def execute(self, params: CreateParams) -> CommandResult:
        loop = asyncio.get_running_loop()
        session_id = await loop.run_in_executor(None, self._manager.create, params.shell, params.cwd)
        return CommandOk(value=session_id)


class StartPtyStreamCommand(_TerminalCommand, BaseCommand[SessionParams]):
    name: ClassVar[str] = "start_pty_stream"
    description: ClassVar[str] = "Start emitting pty-output-<id> events for a session."
    param_model: ClassVar[type[BaseModel]] = SessionParams

    async def execute(self, params: SessionParams) -> CommandResult:
        await self._manager.start_streaming(params.pty_id)
        return CommandOk()


class WritePtyCommand(_TerminalCommand, BaseCommand[WriteParams]):
    name: ClassVar[str] = "write_pty"
    description: ClassVar[str] = "Send input to a session."
    param_model: ClassVar[type[BaseModel]] = WriteParams

    async def execute(self, params: WriteParams) -> CommandResult:
        # Blocks while the shell is not reading its input
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._manager.write, params.pty_id, params.data)
        return CommandOk()


class ResizePtyCommand(_TerminalCommand, BaseCommand[ResizeParams]):
    name: ClassVar[str] = "resize_pty"
    description: ClassVar[str] = "Resize a session's terminal (no-op without pty support)."
    param_model: ClassVar[type[BaseModel]] = ResizeParams

    async def execute(self, params: ResizeParams) -> CommandResult:
        self._manager.resize(params.pty_id, params.cols, params.rows)
        return CommandOk()


class KillPtyCommand(_TerminalCommand, BaseCommand[SessionParams]):
    name: ClassVar[str] = "kill_pty"
    description: ClassVar[str] = "Terminate a session and free its id."
    param_model: ClassVar[type[BaseModel]] = SessionParams

    async def execute(self, params: SessionParams) -> CommandResult:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._manager.kill, params.pty_id)
        return CommandOk()
