"""Tests for polaris.session.wire (Wire, WireEvent, EventType)."""

from __future__ import annotations

import asyncio

from polaris.session.wire import EventType, Wire, WireEvent


# ---------------------------------------------------------------------------
# EventType / WireEvent
# ---------------------------------------------------------------------------


class TestEventType:
    def test_all_variants_exist(self) -> None:
        assert {e.name for e in EventType} == {"PTY_OUTPUT", "PTY_EXIT"}


class TestWireEvent:
    def test_defaults(self) -> None:
        event = WireEvent(type=EventType.PTY_EXIT)
        assert event.data == {}
        assert event.session_id is None

    def test_name_without_session(self) -> None:
        assert WireEvent(type=EventType.PTY_EXIT).name == "pty-exit"

    def test_name_scoped_to_session(self) -> None:
        event = WireEvent(type=EventType.PTY_OUTPUT, session_id=12)
        assert event.name == "pty-output-12"


# ---------------------------------------------------------------------------
# Wire — basic send/subscribe
# ---------------------------------------------------------------------------


class TestWire:
    def test_send_to_subscriber(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.send_pty_output(1, "hi")
        event = q.get_nowait()
        assert event is not None
        assert event.type == EventType.PTY_OUTPUT
        assert event.data == {"data": "hi"}
        assert event.session_id == 1

    def test_send_to_multiple_subscribers(self) -> None:
        wire = Wire()
        q1 = wire.subscribe()
        q2 = wire.subscribe()
        wire.send_pty_exit(1, 0)
        e1 = q1.get_nowait()
        e2 = q2.get_nowait()
        assert e1 is not None and e2 is not None
        assert e1.type == e2.type == EventType.PTY_EXIT

    def test_named_subscription_filters(self) -> None:
        wire = Wire()
        only_two = wire.subscribe("pty-output-2")
        wire.send_pty_output(1, "one")
        wire.send_pty_exit(2, 0)
        wire.send_pty_output(2, "two")
        event = only_two.get_nowait()
        assert event is not None
        assert event.data["data"] == "two"
        assert only_two.empty()

    def test_send_pty_exit(self) -> None:
        wire = Wire()
        q = wire.subscribe("pty-exit-4")
        wire.send_pty_exit(4, None)
        event = q.get_nowait()
        assert event is not None
        assert event.type == EventType.PTY_EXIT
        assert event.data == {"exit_code": None}

    def test_unsubscribe(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.unsubscribe(q)
        wire.send_pty_output(1, "x")
        assert q.empty()

    def test_unsubscribe_nonexistent_is_safe(self) -> None:
        wire = Wire()
        q: asyncio.Queue[WireEvent | None] = asyncio.Queue()
        wire.unsubscribe(q)  # Should not raise


# ---------------------------------------------------------------------------
# Wire — closed-state guard
# ---------------------------------------------------------------------------


class TestWireClosedGuard:
    def test_close_sends_none_sentinel_to_all(self) -> None:
        wire = Wire()
        q1 = wire.subscribe()
        q2 = wire.subscribe("pty-output-1")
        wire.close()
        assert q1.get_nowait() is None
        assert q2.get_nowait() is None

    def test_send_after_close_is_dropped(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.close()
        assert q.get_nowait() is None
        wire.send_pty_output(1, "too late")
        assert q.empty()

    def test_close_idempotent(self) -> None:
        wire = Wire()
        q = wire.subscribe()
        wire.close()
        wire.close()
        assert q.get_nowait() is None
        assert q.empty()
