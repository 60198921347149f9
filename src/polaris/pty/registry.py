"""Session registry — process-wide table of live terminal sessions."""

from __future__ import annotations

import asyncio
import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from polaris.pty.errors import SessionNotFound
from polaris.pty.platform import PlatformSession

logger = logging.getLogger(__name__)

Spawner = Callable[[str, str], PlatformSession]


class SessionState(enum.Enum):
    """Lifecycle states for a terminal session."""

    CREATED = "created"
    STREAMING = "streaming"  # Output streamer attached
    TERMINATED = "terminated"  # Killed; absorbing


@dataclass
class SessionHandle:
    """Registry entry for one session.

    Shared by the registry and the session's output streamer. The stop
    flag is set exactly once, by kill.
    """

    id: int
    shell: str
    cwd: str
    platform: PlatformSession
    stop: threading.Event = field(default_factory=threading.Event)
    state: SessionState = SessionState.CREATED
    streamer: asyncio.Task | None = field(default=None, repr=False)

    @property
    def exited(self) -> bool:
        """True once the underlying process has exited on its own or been killed."""
        return self.platform.poll() is not None

    def describe(self) -> dict[str, object]:
        return {
            "id": self.id,
            "shell": self.shell,
            "cwd": self.cwd,
            "pid": self.platform.pid,
            "state": self.state.value,
            "alive": not self.exited,
        }


class SessionRegistry:
    """Maps session ids to handles and allocates ids.

    Ids come from one counter starting at 1 and are never reused. The map
    and the counter share a single lock, so allocation and insertion are one
    step and a removed handle is never visible to two owners.
    """

    def __init__(self, spawner: Spawner) -> None:
        self._spawner = spawner
        self._sessions: dict[int, SessionHandle] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, shell: str, cwd: str) -> int:
        """Spawn a session and register it under a fresh id.

        Raises:
            SpawnFailure: Nothing is registered and no id is consumed.
        """
        platform = self._spawner(shell, cwd)
        with self._lock:
            session_id = self._next_id
            self._next_id += 1
            self._sessions[session_id] = SessionHandle(
                id=session_id, shell=shell, cwd=cwd, platform=platform
            )
        logger.info("Session %d registered (pid=%d)", session_id, platform.pid)
        return session_id

    def get(self, session_id: int) -> SessionHandle:
        with self._lock:
            handle = self._sessions.get(session_id)
        if handle is None:
            raise SessionNotFound(session_id)
        return handle

    def remove(self, session_id: int) -> SessionHandle:
        with self._lock:
            handle = self._sessions.pop(session_id, None)
        if handle is None:
            raise SessionNotFound(session_id)
        return handle

    def ids(self) -> list[int]:
        with self._lock:
            return list(self._sessions)

    def handles(self) -> list[SessionHandle]:
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
