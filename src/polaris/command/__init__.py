"""Command system — base classes and registry for front-end operations."""

from polaris.command.base import BaseCommand, CommandError, CommandOk, CommandResult
from polaris.command.registry import CommandRegistry

__all__ = [
    "BaseCommand",
    "CommandResult",
    "CommandOk",
    "CommandError",
    "CommandRegistry",
]
