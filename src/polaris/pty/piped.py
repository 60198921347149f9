"""Piped child-process platform session.

Used where no pseudo-terminal facility exists (Windows) or when the pipe
backend is forced by configuration. There is no terminal behind the
process, so resizing is a successful no-op.
"""

from __future__ import annotations

import errno
import logging
import os
import select
import subprocess
import threading
from typing import IO, TYPE_CHECKING

from polaris.pty.errors import IOFailure, SpawnFailure

if TYPE_CHECKING:
    from polaris.config import TerminalConfig

logger = logging.getLogger(__name__)


class PipeReader:
    """Lock-guarded reader over the child's stdout (one reader at a time)."""

    def __init__(self, stream: IO[bytes], poll_interval: float = 0.1) -> None:
        self._stream = stream
        self._poll_interval = poll_interval
        self._lock = threading.Lock()

    def read(self, size: int) -> bytes:
        with self._lock:
            if self._stream.closed:
                raise OSError(errno.EBADF, "stdout pipe is closed")
            fd = self._stream.fileno()
            if os.name == "posix":
                ready, _, _ = select.select([fd], [], [], self._poll_interval)
                if not ready:
                    return b""
            # Windows pipes cannot be selected; the read blocks until the
            # child writes or exits.
            return os.read(fd, size)

    def close(self, timeout: float = 2.0) -> None:
        if not self._lock.acquire(timeout=timeout):
            logger.debug("stdout pipe still being read, leaving it to the process object")
            return
        try:
            self._stream.close()
        except OSError as e:
            logger.debug("Closing stdout pipe failed: %s", e)
        finally:
            self._lock.release()


class PipedSession:
    """A shell whose stdin/stdout are pipes; stderr is merged into stdout."""

    def __init__(self, proc: subprocess.Popen, kill_timeout: float = 2.0, poll_interval: float = 0.1) -> None:
        if proc.stdin is None or proc.stdout is None:
            raise ValueError("PipedSession requires a process with piped stdin and stdout")
        self._proc = proc
        self._stdin: IO[bytes] = proc.stdin
        self._reader = PipeReader(proc.stdout, poll_interval=poll_interval)
        self._kill_timeout = kill_timeout
        self._write_lock = threading.Lock()

    @classmethod
    def spawn(cls, shell: str, cwd: str, config: TerminalConfig) -> PipedSession:
        try:
            proc = subprocess.Popen(
                [shell],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                cwd=cwd,
                env={**os.environ, "TERM": "dumb"},
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise SpawnFailure(shell, str(e)) from e

        logger.info("Piped process spawned: pid=%d shell=%s cwd=%s", proc.pid, shell, cwd)
        return cls(proc, kill_timeout=config.kill_timeout, poll_interval=config.read_poll_interval)

    @property
    def pid(self) -> int:
        return self._proc.pid

    def write(self, data: bytes) -> None:
        with self._write_lock:
            try:
                self._stdin.write(data)
                self._stdin.flush()
            except (OSError, ValueError) as e:
                # ValueError: write to a closed file
                raise IOFailure(f"Failed to write to process stdin: {e}") from e

    def resize(self, cols: int, rows: int) -> None:
        logger.debug("Resize to %dx%d ignored for piped pid=%d", cols, rows, self._proc.pid)

    def new_reader(self) -> PipeReader:
        return self._reader

    def poll(self) -> int | None:
        return self._proc.poll()

    def terminate(self) -> None:
        """Forcibly kill the child and release its pipes."""
        if self._proc.poll() is None:
            try:
                self._proc.kill()
            except ProcessLookupError:
                logger.debug("Process already gone: %d", self._proc.pid)
            try:
                self._proc.wait(timeout=self._kill_timeout)
            except subprocess.TimeoutExpired:
                logger.warning("Piped pid=%d did not exit after kill", self._proc.pid)

        with self._write_lock:
            try:
                self._stdin.close()
            except OSError as e:
                logger.debug("Closing stdin of pid=%d failed: %s", self._proc.pid, e)
        self._reader.close(timeout=self._kill_timeout)
