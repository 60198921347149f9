"""One-shot command runner for the terminal panel's command bar.

A handful of built-ins are answered directly; anything else runs through
the platform shell and its captured stdout is returned.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\x1b[2J\x1b[H"

BUILTINS = {
    "help": "Show this list of built-in commands",
    "clear": "Clear the terminal screen",
    "echo": "Print the given arguments",
}


class CommandFailed(Exception):
    """A one-shot command exited with a non-zero status or could not start."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def help_text() -> str:
    width = max(len(name) for name in BUILTINS)
    lines = ["Built-in commands:"]
    lines += [f"  {name.ljust(width)}  {desc}" for name, desc in BUILTINS.items()]
    lines.append("Anything else is run by the system shell.")
    return "\n".join(lines)


def _split(command: str) -> list[str]:
    try:
        return shlex.split(command, posix=os.name == "posix")
    except ValueError:
        # Unbalanced quotes: fall back to whitespace splitting
        return command.split()


def run_builtin(command: str) -> str | None:
    """Answer ``command`` if it is a built-in; otherwise return None."""
    stripped = command.strip()
    name, _, rest = stripped.partition(" ")
    if name == "help" and not rest.strip():
        return help_text()
    if name == "clear" and not rest.strip():
        return CLEAR_SCREEN
    if name == "echo":
        return " ".join(_split(rest))
    return None


async def execute_command(command: str, cwd: str | None = None, timeout: float | None = None) -> str:
    """Run a full command line and return its standard output.

    Args:
        command: Command line as typed by the user.
        cwd: Working directory; defaults to the current directory.
        timeout: Seconds before the command is killed; None waits forever.

    Raises:
        CommandFailed: Non-zero exit (message is stderr, or a generic
            message when stderr is empty), timeout, or spawn error.
    """
    if not command.strip():
        return ""

    builtin = run_builtin(command)
    if builtin is not None:
        return builtin

    logger.debug("Running one-shot command: %s", command)
    try:
        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        raise CommandFailed(f"Failed to start command: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise CommandFailed(f"Command timed out after {timeout}s: {command}") from None

    exit_code = process.returncode or 0
    if exit_code != 0:
        message = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
        if not message:
            message = f"Command failed with exit code {exit_code}"
        raise CommandFailed(message, exit_code=exit_code)

    return stdout.decode("utf-8", errors="replace") if stdout else ""
