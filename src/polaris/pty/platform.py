"""Platform session capability set and variant selection.

A platform session is whatever owns the OS side of one terminal: a
pseudo-terminal pair on POSIX, or a child process with piped stdio where
no pty facility exists. Callers only rely on the capabilities declared by
``PlatformSession``; the two variants share no base class.
"""

from __future__ import annotations

import importlib.util
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from polaris.pty.errors import SpawnFailure

if TYPE_CHECKING:
    from polaris.config import TerminalConfig

logger = logging.getLogger(__name__)

HAS_PTY = importlib.util.find_spec("pty") is not None and importlib.util.find_spec("termios") is not None


@runtime_checkable
class OutputReader(Protocol):
    """Readable handle over a session's output source."""

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes. May block.

        Returns ``b""`` when no data is currently available or the source
        reached EOF. Raises ``OSError`` on read failure.
        """
        ...

    def close(self) -> None: ...


@runtime_checkable
class PlatformSession(Protocol):
    """Capabilities every platform session provides."""

    @property
    def pid(self) -> int: ...

    def write(self, data: bytes) -> None: ...

    def resize(self, cols: int, rows: int) -> None: ...

    def terminate(self) -> None: ...

    def new_reader(self) -> OutputReader: ...

    def poll(self) -> int | None:
        """Exit code of the underlying process, or None while it runs."""
        ...


def resolve_backend(backend: str) -> str:
    """Map a configured backend name to ``"pty"`` or ``"pipe"``."""
    if backend == "auto":
        return "pty" if HAS_PTY else "pipe"
    if backend == "pty" and not HAS_PTY:
        raise ValueError("pty backend is not available on this platform")
    if backend not in ("pty", "pipe"):
        raise ValueError(f"Unknown terminal backend: {backend}")
    return backend


def spawn_platform_session(shell: str, cwd: str, config: TerminalConfig) -> PlatformSession:
    """Spawn ``shell`` in ``cwd`` using the variant chosen by ``config.backend``.

    Raises:
        SpawnFailure: The backend is unavailable, or the OS could not create
            the pty or the process.
    """
    try:
        backend = resolve_backend(config.backend)
    except ValueError as e:
        raise SpawnFailure(shell, str(e)) from e
    logger.debug("Spawning %s in %s (backend=%s)", shell, cwd, backend)
    if backend == "pty":
        from polaris.pty.unix import PtySession

        return PtySession.spawn(shell, cwd, config)

    from polaris.pty.piped import PipedSession

    return PipedSession.spawn(shell, cwd, config)
