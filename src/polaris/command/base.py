"""Base command classes with Pydantic parameter validation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from polaris.pty.errors import TerminalError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class CommandResult:
    """Base result of a command invocation."""

    value: Any = None
    message: str = ""
    is_error: bool = False


@dataclass
class CommandOk(CommandResult):
    """Successful command result."""

    is_error: bool = False


@dataclass
class CommandError(CommandResult):
    """Failed command result; ``message`` is shown to the user."""

    is_error: bool = True


class BaseCommand(ABC, Generic[T]):
    """Base class for operations the editor front end can invoke.

    Commands take structured arguments and always answer with a
    ``CommandResult``; no exception crosses this boundary.

    Usage:
        class ResizeParams(BaseModel):
            pty_id: int
            cols: int
            rows: int

        class ResizeCommand(BaseCommand[ResizeParams]):
            name = "resize_pty"
            description = "Resize a terminal"
            param_model = ResizeParams

            async def execute(self, params: ResizeParams) -> CommandResult:
                return CommandOk()
    """

    name: ClassVar[str]
    description: ClassVar[str]
    param_model: ClassVar[type[BaseModel]]

    async def __call__(self, arguments: dict[str, Any]) -> CommandResult:
        """Validate arguments and execute, converting errors into results."""
        try:
            params = self.param_model.model_validate(arguments)
        except ValidationError as e:
            return CommandError(message=f"Invalid parameters: {e}")

        try:
            return await self.execute(params)  # type: ignore[arg-type]
        except TerminalError as e:
            logger.debug("Command %s failed: %s", self.name, e)
            return CommandError(message=str(e))
        except Exception as e:
            logger.error("Command %s execution error: %s", self.name, e, exc_info=True)
            return CommandError(message=f"Error executing {self.name}: {e}")

    @abstractmethod
    async def execute(self, params: T) -> CommandResult:
        """Execute the command with validated parameters."""
        ...


class NoParams(BaseModel):
    pass
