"""
Tests for push-to-talk capture.

Covers the session transitions on their own and the controller driving
them from key presses and microphone chunks on the event bus.
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from workday_agent.domain.capture import (
    CaptureController,
    CaptureSession,
    CaptureState,
    KeyAction,
    append_chunk,
    end_capture,
    start_capture,
)
from workday_agent.events.event_interface import AudioChunkEvent, EventType, KeyPressEvent


# Session transitions

def test_new_session_is_idle_and_empty():
    """Test a new session starts idle with nothing buffered."""
    session = CaptureSession()

    assert session.state == CaptureState.IDLE
    assert session.buffer == []


def test_chunks_while_idle_are_discarded():
    """Test audio is not buffered while idle."""
    session = append_chunk(CaptureSession(), b"\x01\x00")

    assert session.buffer == []


def test_start_clears_buffer_and_records():
    """Test starting clears any buffered audio."""
    session = CaptureSession(active=True, buffer=[b"old"])

    session = start_capture(session)

    assert session.state == CaptureState.RECORDING
    assert session.buffer == []


def test_end_flushes_chunks_in_order():
    """Test ending joins the chunks in arrival order and returns to idle."""
    session = start_capture(CaptureSession())
    for chunk in (b"ab", b"cd", b"ef"):
        session = append_chunk(session, chunk)

    session, recording = end_capture(session)

    assert recording == b"abcdef"
    assert session.state == CaptureState.IDLE
    assert session.buffer == []


def test_end_with_empty_buffer_keeps_recording():
    """Test ending with nothing recorded keeps recording."""
    session = start_capture(CaptureSession())

    session, recording = end_capture(session)

    assert recording is None
    assert session.state == CaptureState.RECORDING


def test_end_while_idle_does_nothing():
    """Test ending while idle returns no recording."""
    session, recording = end_capture(CaptureSession())

    assert recording is None
    assert session.state == CaptureState.IDLE


# Controller

@pytest.fixture
def sender():
    return AsyncMock(return_value=True)


@pytest.fixture
def controller(bus, sender):
    controller = CaptureController(
        sender, bus=bus, start_key="space", end_key="return", cancel_key="c"
    )
    controller.start()
    return controller


def press(bus, name, ctrl=False):
    bus.emit(KeyPressEvent(type=EventType.KEY_PRESSED, name=name, ctrl=ctrl))


def mic(bus, chunk):
    bus.emit(AudioChunkEvent(type=EventType.MIC_AUDIO_CHUNK, chunk=chunk))


@pytest.mark.asyncio
async def test_recording_is_sent_once_as_single_buffer(bus, controller, sender):
    """Test a recording is sent once as one buffer."""
    press(bus, "space")
    mic(bus, b"\x01\x00")
    mic(bus, b"\x02\x00")
    press(bus, "return")

    assert controller.state == CaptureState.IDLE
    await asyncio.sleep(0)

    sender.assert_awaited_once_with(b"\x01\x00\x02\x00")


@pytest.mark.asyncio
async def test_chunks_before_start_are_not_sent(bus, controller, sender):
    """Test audio from before the start key is not sent."""
    mic(bus, b"\xff\x00")
    press(bus, "space")
    mic(bus, b"\x01\x00")
    press(bus, "return")
    await asyncio.sleep(0)

    sender.assert_awaited_once_with(b"\x01\x00")


@pytest.mark.asyncio
async def test_restart_discards_earlier_chunks(bus, controller, sender, caplog):
    """Test a second start key drops the audio recorded so far."""
    with caplog.at_level(logging.INFO):
        press(bus, "space")
        mic(bus, b"\x01\x00")
        press(bus, "space")
        mic(bus, b"\x02\x00")
        press(bus, "return")
        await asyncio.sleep(0)

    sender.assert_awaited_once_with(b"\x02\x00")
    assert "discarded 2 bytes" in caplog.text


@pytest.mark.asyncio
async def test_end_key_with_empty_buffer_sends_nothing(bus, controller, sender):
    """Test the end key does nothing until audio has been recorded."""
    press(bus, "space")
    press(bus, "return")
    await asyncio.sleep(0)

    sender.assert_not_called()
    assert controller.state == CaptureState.RECORDING

    mic(bus, b"\x03\x00")
    press(bus, "return")
    await asyncio.sleep(0)

    sender.assert_awaited_once_with(b"\x03\x00")


@pytest.mark.asyncio
async def test_end_key_while_idle_sends_nothing(controller, sender):
    """Test the end key is ignored while idle."""
    assert controller.handle_key("return") == KeyAction.IGNORED
    await asyncio.sleep(0)

    sender.assert_not_called()


@pytest.mark.asyncio
async def test_new_recording_can_start_while_send_in_flight(bus):
    """Test a new recording can start before the previous send completes."""
    release = asyncio.Event()
    sent = []

    async def slow_send(recording):
        await release.wait()
        sent.append(recording)

    controller = CaptureController(slow_send, bus=bus, start_key="space", end_key="return", cancel_key="c")

    controller.handle_key("space")
    controller.handle_chunk(b"\x01\x00")
    assert controller.handle_key("return") == KeyAction.SENT
    await asyncio.sleep(0)

    assert controller.handle_key("space") == KeyAction.STARTED
    controller.handle_chunk(b"\x02\x00")
    assert controller.session.buffer == [b"\x02\x00"]

    release.set()
    await asyncio.gather(*controller.task_manager.tasks)
    await controller.stop()

    assert sent == [b"\x01\x00"]


@pytest.mark.asyncio
async def test_failed_send_does_not_change_state(controller, sender):
    """Test a failing send leaves the controller idle."""
    sender.side_effect = ConnectionError("socket closed")

    controller.handle_key("space")
    controller.handle_chunk(b"\x01\x00")
    controller.handle_key("return")
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert controller.state == CaptureState.IDLE
    assert controller.handle_key("space") == KeyAction.STARTED


@pytest.mark.asyncio
async def test_capture_events_are_published(bus, controller):
    """Test recording start and flush are announced on the bus."""
    started = MagicMock()
    flushed = MagicMock()
    bus.on(EventType.CAPTURE_STARTED, started)
    bus.on(EventType.CAPTURE_FLUSHED, flushed)

    press(bus, "space")
    mic(bus, b"\x00\x00" * 24)
    press(bus, "return")

    started.assert_called_once()
    assert started.call_args[0][0].data == {"restarted": False}
    flushed.assert_called_once()
    assert flushed.call_args[0][0].data["bytes"] == 48
    assert flushed.call_args[0][0].data["duration"] == pytest.approx(0.001)


def test_cancel_key_requests_shutdown(bus, controller):
    """Test Ctrl+C requests shutdown."""
    shutdown = MagicMock()
    bus.on(EventType.SHUTDOWN, shutdown)

    press(bus, "c", ctrl=True)

    shutdown.assert_called_once()
    assert shutdown.call_args[0][0].data["reason"] == "cancel_key"


def test_plain_c_and_other_keys_are_ignored(bus, controller):
    """Test unbound keys and c without Ctrl are ignored."""
    shutdown = MagicMock()
    bus.on(EventType.SHUTDOWN, shutdown)

    assert controller.handle_key("c") == KeyAction.IGNORED
    assert controller.handle_key("x") == KeyAction.IGNORED
    assert controller.state == CaptureState.IDLE
    shutdown.assert_not_called()


@pytest.mark.asyncio
async def test_stop_unsubscribes(bus, controller, sender):
    """Test a stopped controller no longer reacts to keys."""
    await controller.stop()

    press(bus, "space")

    assert controller.state == CaptureState.IDLE
    assert bus.handler_count(EventType.KEY_PRESSED) == 0
    assert bus.handler_count(EventType.MIC_AUDIO_CHUNK) == 0
