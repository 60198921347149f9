"""Wire protocol — decouples terminal sessions from the UI.

Output streamers publish events onto the wire; the UI subscribes and
renders them. Events carry a name scoped to their session
(``pty-output-3``), matching the per-terminal listeners of the editor
front end.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Any


class EventType(enum.Enum):
    PTY_OUTPUT = "pty-output"
    PTY_EXIT = "pty-exit"


@dataclass
class WireEvent:
    """An event on the wire."""

    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    session_id: int | None = None

    @property
    def name(self) -> str:
        """Event name, suffixed with the session id for session events."""
        if self.session_id is None:
            return self.type.value
        return f"{self.type.value}-{self.session_id}"


class Wire:
    """Async message bus: sessions -> UI subscribers.

    Multi-producer, multi-consumer broadcast. A subscriber may restrict
    itself to a single event name. ``send`` must be called from the event
    loop thread that owns the subscriber queues.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[asyncio.Queue[WireEvent | None], str | None]] = []
        self._closed: bool = False

    def send(self, event: WireEvent) -> None:
        """Send an event to all matching subscribers.

        Silently drops events after ``close()`` has been called.
        """
        if self._closed:
            return
        name = event.name
        for q, wanted in self._subscribers:
            if wanted is None or wanted == name:
                q.put_nowait(event)

    def send_pty_output(self, session_id: int, text: str) -> None:
        self.send(WireEvent(type=EventType.PTY_OUTPUT, data={"data": text}, session_id=session_id))

    def send_pty_exit(self, session_id: int, exit_code: int | None) -> None:
        """Notify subscribers that a session's process exited on its own."""
        self.send(
            WireEvent(type=EventType.PTY_EXIT, data={"exit_code": exit_code}, session_id=session_id)
        )

    def subscribe(self, name: str | None = None) -> asyncio.Queue[WireEvent | None]:
        """Subscribe to events, optionally only those called ``name``.

        Returns a queue to read from; ``None`` marks the wire closing.
        """
        q: asyncio.Queue[WireEvent | None] = asyncio.Queue()
        self._subscribers.append((q, name))
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        """Unsubscribe from events."""
        self._subscribers = [(sq, name) for sq, name in self._subscribers if sq is not q]

    def close(self) -> None:
        """Signal all subscribers that the wire is closing."""
        if self._closed:
            return
        self._closed = True
        for q, _name in self._subscribers:
            q.put_nowait(None)
