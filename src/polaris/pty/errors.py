"""Terminal error taxonomy.

Every error carries a short human-readable message; the command layer
surfaces ``str(error)`` to the UI unchanged.
"""

from __future__ import annotations


class TerminalError(Exception):
    """Base class for terminal session errors."""


class SessionNotFound(TerminalError):
    """The session id is not (or no longer) in the registry."""

    def __init__(self, session_id: int) -> None:
        super().__init__("PTY not found")
        self.session_id = session_id


class SpawnFailure(TerminalError):
    """The OS refused to create the pty or child process."""

    def __init__(self, shell: str, reason: str) -> None:
        super().__init__(f"Failed to spawn {shell}: {reason}")
        self.shell = shell
        self.reason = reason


class IOFailure(TerminalError):
    """A read, write or resize against a session failed at the OS level."""
