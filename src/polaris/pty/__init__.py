"""Terminal sessions — pseudo-terminal or piped shells behind one interface.

Each session is spawned on the platform's best primitive, registered under
a numeric id, streamed to the UI over the wire, and terminated by an
explicit kill.
"""

from polaris.pty.errors import IOFailure, SessionNotFound, SpawnFailure, TerminalError
from polaris.pty.manager import TerminalManager
from polaris.pty.platform import OutputReader, PlatformSession, spawn_platform_session
from polaris.pty.registry import SessionHandle, SessionRegistry, SessionState
from polaris.pty.streamer import ChunkDecoder, OutputStreamer

__all__ = [
    "ChunkDecoder",
    "IOFailure",
    "OutputReader",
    "OutputStreamer",
    "PlatformSession",
    "SessionHandle",
    "SessionNotFound",
    "SessionRegistry",
    "SessionState",
    "SpawnFailure",
    "TerminalError",
    "TerminalManager",
    "spawn_platform_session",
]
