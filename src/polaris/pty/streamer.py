"""Output streamer — forwards a session's output onto the wire."""

from __future__ import annotations

import asyncio
import codecs
import errno
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from polaris.pty.errors import IOFailure

if TYPE_CHECKING:
    from polaris.config import TerminalConfig
    from polaris.pty.platform import OutputReader
    from polaris.pty.registry import SessionHandle
    from polaris.session.wire import Wire

logger = logging.getLogger(__name__)

# The pty hung up (all slave ends closed) or the fd is gone: nothing more to read.
_FATAL_ERRNOS = frozenset({errno.EIO, errno.EBADF})

# How long to wait for the process to be reapable after its output ends.
_EXIT_GRACE = 0.5


class ChunkDecoder:
    """Lossy UTF-8 decoding of output chunks.

    With ``carry_partial`` an incomplete multi-byte sequence at the end of a
    chunk is held back and completed by the next one. Without it each chunk
    is decoded on its own, so a character split across two reads turns into
    replacement characters on both sides.
    """

    def __init__(self, carry_partial: bool = True) -> None:
        self._decoder = (
            codecs.getincrementaldecoder("utf-8")(errors="replace") if carry_partial else None
        )

    def decode(self, data: bytes) -> str:
        if self._decoder is None:
            return data.decode("utf-8", errors="replace")
        return self._decoder.decode(data)

    def flush(self) -> str:
        """Return whatever is still held back, as replacement characters."""
        if self._decoder is None:
            return ""
        return self._decoder.decode(b"", final=True)


class OutputStreamer:
    """Reads one session's output and emits it as ``pty-output-<id>`` events.

    Each read may block, so it runs on a single-thread executor owned by
    this streamer; a stuck read never holds up other sessions or the event
    loop. The loop stops when the session's stop flag is set, when the
    output source is exhausted, or on an unrecoverable read error. Read
    errors are never reported to callers.
    """

    def __init__(self, handle: SessionHandle, wire: Wire, config: TerminalConfig) -> None:
        self._handle = handle
        self._wire = wire
        self._config = config
        self._decoder = ChunkDecoder(carry_partial=config.carry_partial_utf8)

    async def run(self) -> None:
        handle = self._handle
        try:
            reader = handle.platform.new_reader()
        except IOFailure as e:
            logger.debug("Session %d: no reader, streamer not started: %s", handle.id, e)
            return

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"pty-reader-{handle.id}")
        loop = asyncio.get_running_loop()
        logger.debug("Session %d: streamer started", handle.id)
        # The reader is always closed on its own thread, after any in-flight read.
        try:
            await self._read_loop(reader, executor)
        except asyncio.CancelledError:
            logger.debug("Session %d: streamer cancelled", handle.id)
            executor.submit(reader.close)
            executor.shutdown(wait=False)
            raise
        except Exception as e:
            logger.debug("Session %d: streamer ended: %s", handle.id, e, exc_info=True)

        await loop.run_in_executor(executor, reader.close)
        executor.shutdown(wait=False)
        logger.debug("Session %d: streamer stopped", handle.id)

    async def _read_loop(self, reader: OutputReader, executor: ThreadPoolExecutor) -> None:
        handle = self._handle
        while not handle.stop.is_set():
            try:
                data = await self._read(reader, executor)
            except OSError as e:
                if handle.stop.is_set():
                    break
                logger.debug("Session %d: read failed: %s", handle.id, e)
                await self._finish()
                break

            if data:
                text = self._decoder.decode(data)
                if text:
                    self._wire.send_pty_output(handle.id, text)
                continue

            if handle.stop.is_set():
                break
            if handle.platform.poll() is not None:
                await self._finish()
                break
            await asyncio.sleep(self._config.idle_sleep)

    async def _read(self, reader: OutputReader, executor: ThreadPoolExecutor) -> bytes:
        loop = asyncio.get_running_loop()
        data = b""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(self._is_transient),
            stop=stop_after_attempt(self._config.read_retries),
            wait=wait_exponential(multiplier=max(self._config.idle_sleep, 0.001), max=0.5),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                data = await loop.run_in_executor(executor, reader.read, self._config.read_chunk_size)
        return data

    def _is_transient(self, exc: BaseException) -> bool:
        if self._handle.stop.is_set():
            return False
        return isinstance(exc, OSError) and exc.errno not in _FATAL_ERRNOS

    async def _finish(self) -> None:
        """Flush held-back bytes and report the exit if the process is gone."""
        handle = self._handle
        tail = self._decoder.flush()
        if tail:
            self._wire.send_pty_output(handle.id, tail)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + _EXIT_GRACE
        exit_code = handle.platform.poll()
        while exit_code is None and loop.time() < deadline and not handle.stop.is_set():
            await asyncio.sleep(0.05)
            exit_code = handle.platform.poll()

        if exit_code is not None and not handle.stop.is_set():
            logger.info("Session %d: process exited (code=%s)", handle.id, exit_code)
            self._wire.send_pty_exit(handle.id, exit_code)
