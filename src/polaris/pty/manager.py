"""Terminal manager — lifecycle of interactive shell sessions."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any

from polaris.config import TerminalConfig
from polaris.pty.errors import SessionNotFound
from polaris.pty.platform import spawn_platform_session
from polaris.pty.registry import SessionHandle, SessionRegistry, SessionState, Spawner
from polaris.pty.streamer import OutputStreamer
from polaris.session.wire import Wire
from polaris.system import get_current_directory, get_shell_path

logger = logging.getLogger(__name__)

_U16_MAX = 0xFFFF


class TerminalManager:
    """Creates, drives and tears down terminal sessions.

    One manager is created at application start and passed to whoever
    needs it; ``cleanup()`` at shutdown kills every remaining session.

    - ``create()`` spawns the shell and registers it; output is not read yet.
    - ``start_streaming()`` attaches the output streamer (events go to the wire).
    - ``write()`` / ``resize()`` are routed to the session's platform handle.
    - ``kill()`` stops the streamer, unregisters the id and terminates the shell.
    """

    def __init__(
        self,
        config: TerminalConfig | None = None,
        wire: Wire | None = None,
        spawner: Spawner | None = None,
    ) -> None:
        self._config = config or TerminalConfig()
        self._wire = wire or Wire()
        self._registry = SessionRegistry(
            spawner or partial(spawn_platform_session, config=self._config)
        )

    @property
    def config(self) -> TerminalConfig:
        return self._config

    @property
    def wire(self) -> Wire:
        return self._wire

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, shell: str | None = None, cwd: str | None = None) -> int:
        """Spawn a shell and return its session id.

        Args:
            shell: Shell executable; defaults to the configured or platform shell.
            cwd: Working directory; defaults to the backend's current directory.

        Raises:
            SpawnFailure: The OS could not start the shell.
        """
        shell = shell or self._config.shell or get_shell_path()
        cwd = cwd or get_current_directory()
        session_id = self._registry.create(shell, cwd)
        logger.info("Terminal created: id=%d shell=%s cwd=%s", session_id, shell, cwd)
        return session_id

    async def start_streaming(self, session_id: int) -> None:
        """Start emitting ``pty-output-<id>`` events for a session.

        Starting a session that is already streaming is a no-op.

        Raises:
            SessionNotFound: Unknown or killed session id.
        """
        handle = self._registry.get(session_id)
        if handle.stop.is_set():
            raise SessionNotFound(session_id)
        if handle.streamer is not None and not handle.streamer.done():
            logger.debug("Session %d is already streaming", session_id)
            return

        streamer = OutputStreamer(handle, self._wire, self._config)
        handle.streamer = asyncio.create_task(streamer.run(), name=f"pty-stream-{session_id}")
        handle.state = SessionState.STREAMING
        logger.info("Terminal %d: streaming started", session_id)

    def write(self, session_id: int, data: str | bytes) -> None:
        """Forward raw input (control characters included) to a session.

        Raises:
            SessionNotFound: Unknown or killed session id.
            IOFailure: The OS rejected the write.
        """
        handle = self._registry.get(session_id)
        if isinstance(data, str):
            data = data.encode("utf-8")
        handle.platform.write(data)

    def resize(self, session_id: int, cols: int, rows: int) -> None:
        """Set a session's terminal size. No-op for piped sessions.

        Raises:
            ValueError: ``cols`` or ``rows`` outside 0..65535.
            SessionNotFound: Unknown or killed session id.
            IOFailure: The OS rejected the resize.
        """
        for label, value in (("cols", cols), ("rows", rows)):
            if not 0 <= value <= _U16_MAX:
                raise ValueError(f"{label} must be between 0 and {_U16_MAX}, got {value}")
        handle = self._registry.get(session_id)
        handle.platform.resize(cols, rows)

    def kill(self, session_id: int) -> SessionHandle:
        """Terminate a session and free its id.

        The streamer observes the stop flag (or the read error caused by
        termination) and exits on its own. Returns the detached handle.

        Raises:
            SessionNotFound: Unknown id, or the session was already killed.
        """
        handle = self._registry.remove(session_id)
        handle.stop.set()
        handle.state = SessionState.TERMINATED
        logger.info("Killing terminal: %d", session_id)
        try:
            handle.platform.terminate()
        except OSError as e:
            logger.warning("Error terminating session %d: %s", session_id, e)
        return handle

    async def wait_stopped(self, handle: SessionHandle, timeout: float | None = None) -> bool:
        """Wait for a session's streamer to finish. True if it did (or never ran)."""
        task = handle.streamer
        if task is None or task.done():
            return True
        done, _ = await asyncio.wait({task}, timeout=timeout)
        return task in done

    async def cleanup(self, timeout: float = 5.0) -> None:
        """Kill all sessions and wait for their streamers. Called on shutdown."""
        loop = asyncio.get_running_loop()
        handles: list[SessionHandle] = []
        for session_id in self._registry.ids():
            try:
                handles.append(await loop.run_in_executor(None, self.kill, session_id))
            except SessionNotFound:
                continue

        tasks = {h.streamer for h in handles if h.streamer is not None and not h.streamer.done()}
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
            for task in pending:
                task.cancel()
        logger.info("All terminal sessions cleaned up")

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def get(self, session_id: int) -> SessionHandle:
        return self._registry.get(session_id)

    def list_sessions(self) -> list[dict[str, Any]]:
        """Describe all registered sessions."""
        return [h.describe() for h in self._registry.handles()]

    def __len__(self) -> int:
        return len(self._registry)
