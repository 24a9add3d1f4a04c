"""
Tests for the event system.

This module tests the event bus, subscription groups and event types,
ensuring handlers are registered, called in order and cleaned up.
"""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from workday_agent.events.event_interface import (
    AudioChunkEvent,
    ErrorEvent,
    EventType,
    KeyPressEvent,
    Subscriptions,
    TranscriptEvent,
)


def test_event_registration(bus):
    """Test registering and unregistering event handlers."""
    handler1 = MagicMock()
    handler2 = MagicMock()

    bus.on(EventType.KEY_PRESSED, handler1)
    bus.on(EventType.KEY_PRESSED, handler2)
    bus.on(EventType.KEY_PRESSED, handler1)

    assert bus.handler_count(EventType.KEY_PRESSED) == 2

    bus.off(EventType.KEY_PRESSED, handler1)
    assert bus.handler_count(EventType.KEY_PRESSED) == 1

    bus.off(EventType.KEY_PRESSED)
    assert bus.handler_count(EventType.KEY_PRESSED) == 0


def test_event_propagation(bus):
    """Test events only reach handlers of their own type, plus global handlers."""
    key_handler = MagicMock()
    chunk_handler = MagicMock()
    global_handler = MagicMock()

    bus.on(EventType.KEY_PRESSED, key_handler)
    bus.on(EventType.MIC_AUDIO_CHUNK, chunk_handler)
    bus.on_any(global_handler)

    event = KeyPressEvent(type=EventType.KEY_PRESSED, name="space")
    bus.emit(event)

    key_handler.assert_called_once_with(event)
    chunk_handler.assert_not_called()
    global_handler.assert_called_once_with(event)

    bus.off_any(global_handler)
    bus.emit(EventType.KEY_PRESSED, {"name": "return"})
    assert global_handler.call_count == 1


def test_emit_with_string_type(bus):
    """Test events can be emitted by channel name."""
    handler = MagicMock()
    bus.on("capture.started", handler)

    bus.emit("capture.started", {"restarted": True})

    event = handler.call_args[0][0]
    assert event.type == EventType.CAPTURE_STARTED
    assert event.data == {"restarted": True}


def test_failing_handler_does_not_block_others(bus):
    """Test a raising handler does not stop later handlers."""
    calls = []

    def broken(event):
        raise RuntimeError("boom")

    bus.on(EventType.ERROR, broken)
    bus.on(EventType.ERROR, lambda event: calls.append(event))

    bus.emit(EventType.ERROR, {"error": {"message": "x"}})

    assert len(calls) == 1


def test_handler_may_unsubscribe_during_emit(bus):
    """Test a handler can remove itself while being called."""
    calls = []

    def once(event):
        calls.append(event)
        bus.off(EventType.SHUTDOWN, once)

    bus.on(EventType.SHUTDOWN, once)
    bus.emit(EventType.SHUTDOWN)
    bus.emit(EventType.SHUTDOWN)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_async_handler_runs_on_loop(bus):
    """Test coroutine handlers are scheduled on the running loop."""
    received = asyncio.Event()

    async def handler(event):
        received.set()

    bus.on(EventType.AGENT_RESPONSE_DONE, handler)
    bus.emit(EventType.AGENT_RESPONSE_DONE)

    await asyncio.wait_for(received.wait(), timeout=1.0)


@pytest.mark.asyncio
async def test_emit_threadsafe_delivers_on_loop_thread(bus):
    """Test events emitted from another thread are handled on the loop thread."""
    loop = asyncio.get_running_loop()
    seen = []
    done = asyncio.Event()

    def handler(event):
        seen.append((event.chunk, threading.current_thread() is threading.main_thread()))
        done.set()

    bus.on(EventType.MIC_AUDIO_CHUNK, handler)

    worker = threading.Thread(
        target=bus.emit_threadsafe,
        args=(loop, AudioChunkEvent(type=EventType.MIC_AUDIO_CHUNK, chunk=b"\x01\x02"))
    )
    worker.start()
    worker.join()
    await asyncio.wait_for(done.wait(), timeout=1.0)

    assert seen == [(b"\x01\x02", True)]


def test_subscriptions_close_removes_everything(bus):
    """Test closing a subscription group removes all of its handlers."""
    subscriptions = Subscriptions(bus)
    handler = MagicMock()

    subscriptions.subscribe(EventType.KEY_PRESSED, handler)
    subscriptions.subscribe(EventType.AGENT_WRITING, handler)
    assert len(subscriptions) == 2

    subscriptions.close()
    bus.emit(EventType.KEY_PRESSED)
    bus.emit(EventType.AGENT_WRITING)

    handler.assert_not_called()
    assert len(subscriptions) == 0


def test_unknown_event_type():
    """Test unknown channel names map to UNKNOWN."""
    assert EventType.from_string("no.such.event") == EventType.UNKNOWN


def test_specialized_events_fill_data():
    """Test typed events mirror their fields into data."""
    key = KeyPressEvent(type=EventType.KEY_PRESSED, name="c", ctrl=True)
    transcript = TranscriptEvent(type=EventType.AGENT_WRITING, text="Hi Alex!", role="assistant")
    error = ErrorEvent(type=EventType.ERROR, error={"message": "bad"})

    assert key.data == {"name": "c", "ctrl": True}
    assert transcript.data == {"text": "Hi Alex!", "role": "assistant"}
    assert error.data == {"error": {"message": "bad"}}
