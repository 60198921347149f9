"""Pseudo-terminal backed platform session (POSIX only)."""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import pty
import select
import shutil
import signal
import struct
import subprocess
import sys
import termios
import threading
from typing import TYPE_CHECKING

from polaris.pty.errors import IOFailure, SpawnFailure

if TYPE_CHECKING:
    from polaris.config import TerminalConfig

logger = logging.getLogger(__name__)

# Exec'd in place of the shell: claims the pty slave (fd 0) as controlling
# terminal of the new session, then replaces itself with the shell. Without
# a controlling tty the shell has no job control and never gets SIGWINCH.
_CTTY_EXEC = (
    "import fcntl, os, sys, termios\n"
    "try:\n"
    "    fcntl.ioctl(0, termios.TIOCSCTTY, 0)\n"
    "except OSError:\n"
    "    pass\n"
    "os.execvp(sys.argv[1], sys.argv[1:])\n"
)


def _set_winsize(fd: int, cols: int, rows: int) -> None:
    winsize = struct.pack("HHHH", rows, cols, 0, 0)
    fcntl.ioctl(fd, termios.TIOCSWINSZ, winsize)


class PtyReader:
    """Reader over a private duplicate of the pty master.

    ``read`` waits at most ``poll_interval`` seconds for data and returns
    ``b""`` if none arrived, so the caller can re-check its stop flag.
    """

    def __init__(self, fd: int, poll_interval: float = 0.1) -> None:
        self._fd = fd
        self._poll_interval = poll_interval

    def read(self, size: int) -> bytes:
        if self._fd < 0:
            raise OSError(errno.EBADF, "PTY reader is closed")
        ready, _, _ = select.select([self._fd], [], [], self._poll_interval)
        if not ready:
            return b""
        try:
            return os.read(self._fd, size)
        except BlockingIOError:
            # The master is non-blocking; another reader may have drained it
            return b""

    def close(self) -> None:
        fd, self._fd = self._fd, -1
        if fd >= 0:
            try:
                os.close(fd)
            except OSError as e:
                logger.debug("Closing PTY reader fd %d failed: %s", fd, e)


class PtySession:
    """A shell attached to the slave side of a pseudo-terminal.

    The master fd is non-blocking. Writers and readers each work on their
    own duplicate of it, so ``terminate()`` only has to swap the fd out
    under ``_fd_lock`` and never waits for a write stuck on a shell that
    stopped reading its input. Writes are serialized by ``_write_lock``:
    concurrent writes never interleave.
    """

    def __init__(
        self,
        proc: subprocess.Popen,
        master_fd: int,
        kill_timeout: float = 2.0,
        poll_interval: float = 0.1,
    ) -> None:
        self._proc = proc
        self._master_fd = master_fd
        self._kill_timeout = kill_timeout
        self._poll_interval = poll_interval
        self._fd_lock = threading.Lock()
        self._write_lock = threading.Lock()

    @classmethod
    def spawn(cls, shell: str, cwd: str, config: TerminalConfig) -> PtySession:
        """Open a pty pair and start ``shell`` on its slave side."""
        # The exec helper would only fail after the fork; report it here
        if shutil.which(shell) is None:
            raise SpawnFailure(shell, "No such file or directory")

        try:
            master_fd, slave_fd = pty.openpty()
        except OSError as e:
            raise SpawnFailure(shell, str(e)) from e

        env = {**os.environ, "TERM": config.term}
        try:
            _set_winsize(master_fd, config.cols, config.rows)
            os.set_blocking(master_fd, False)
            proc = subprocess.Popen(
                [sys.executable, "-I", "-c", _CTTY_EXEC, shell],
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                cwd=cwd,
                env=env,
                start_new_session=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            os.close(master_fd)
            raise SpawnFailure(shell, str(e)) from e
        finally:
            # Parent never uses the slave side
            os.close(slave_fd)

        logger.info("PTY spawned: pid=%d shell=%s cwd=%s", proc.pid, shell, cwd)
        return cls(
            proc,
            master_fd,
            kill_timeout=config.kill_timeout,
            poll_interval=config.read_poll_interval,
        )

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def closed(self) -> bool:
        return self._master_fd < 0

    def _dup_master(self) -> int:
        with self._fd_lock:
            if self._master_fd < 0:
                raise IOFailure("PTY is closed")
            try:
                return os.dup(self._master_fd)
            except OSError as e:
                raise IOFailure(f"Failed to clone PTY fd: {e}") from e

    def write(self, data: bytes) -> None:
        """Write raw bytes (control characters included) to the master.

        Blocks while the pty input queue is full, for as long as the session
        is open; raises ``IOFailure`` once it is terminated mid-write.
        """
        with self._write_lock:
            fd = self._dup_master()
            view = memoryview(data)
            try:
                while view:
                    if self.closed:
                        raise IOFailure("PTY closed during write")
                    _, writable, _ = select.select([], [fd], [], self._poll_interval)
                    if not writable:
                        continue
                    try:
                        written = os.write(fd, view)
                    except BlockingIOError:
                        continue
                    view = view[written:]
            except OSError as e:
                raise IOFailure(f"Failed to write to PTY: {e}") from e
            finally:
                os.close(fd)

    def resize(self, cols: int, rows: int) -> None:
        with self._fd_lock:
            if self._master_fd < 0:
                raise IOFailure("PTY is closed")
            try:
                _set_winsize(self._master_fd, cols, rows)
            except OSError as e:
                raise IOFailure(f"Failed to resize PTY: {e}") from e

    def new_reader(self) -> PtyReader:
        return PtyReader(self._dup_master(), poll_interval=self._poll_interval)

    def poll(self) -> int | None:
        return self._proc.poll()

    def terminate(self) -> None:
        """Close the master and hang up the shell's process group."""
        with self._fd_lock:
            fd, self._master_fd = self._master_fd, -1
        if fd >= 0:
            try:
                os.close(fd)
            except OSError as e:
                logger.debug("Closing PTY master failed: %s", e)

        if self._proc.poll() is not None:
            return

        self._signal_group(signal.SIGHUP)
        try:
            self._proc.wait(timeout=self._kill_timeout)
            return
        except subprocess.TimeoutExpired:
            logger.debug("PTY pid=%d ignored SIGHUP, sending SIGKILL", self._proc.pid)

        self._signal_group(signal.SIGKILL)
        try:
            self._proc.wait(timeout=self._kill_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("PTY pid=%d did not exit after SIGKILL", self._proc.pid)

    def _signal_group(self, sig: signal.Signals) -> None:
        # start_new_session makes the shell its own process group leader
        try:
            os.killpg(self._proc.pid, sig)
        except ProcessLookupError:
            logger.debug("Process group already gone: %d", self._proc.pid)
        except PermissionError as e:
            logger.warning("Cannot signal PTY pid=%d: %s", self._proc.pid, e)
