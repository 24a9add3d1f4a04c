"""
Capture controller for push-to-talk recording.

The controller owns the ``CaptureSession`` and drives it from two channels
on the event bus: decoded key presses and microphone chunks. When a
recording is finished it hands the assembled audio to the outbound sender
as a background task and goes straight back to idle, without waiting for
the send to complete.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.domain.capture.session import (
    CaptureSession,
    CaptureState,
    append_chunk,
    end_capture,
    start_capture,
)
from workday_agent.events.event_interface import (
    AudioChunkEvent,
    Event,
    EventBus,
    EventType,
    KeyPressEvent,
    Subscriptions,
    event_bus,
)
from workday_agent.utils.async_helpers import TaskManager
from workday_agent.utils.audio_utilities import get_audio_duration, peak_level_dbfs

logger = get_logger(__name__)

RecordingSender = Callable[[bytes], Awaitable[Any]]


class KeyAction(Enum):
    """What a key press did to the capture session."""

    STARTED = "started"
    SENT = "sent"
    CANCELLED = "cancelled"
    IGNORED = "ignored"


class CaptureController:
    """
    Push-to-talk state machine bound to the event bus.

    Handlers run on the event loop thread one at a time, so the session is
    never touched concurrently.
    """

    def __init__(
        self,
        send_recording: RecordingSender,
        bus: EventBus = event_bus,
        start_key: Optional[str] = None,
        end_key: Optional[str] = None,
        cancel_key: Optional[str] = None,
        task_manager: Optional[TaskManager] = None,
    ):
        """
        Initialize the controller.

        Args:
            send_recording: Coroutine function that delivers a finished recording
            bus: Event bus to subscribe to and publish on
            start_key: Key name that starts a recording
            end_key: Key name that sends the recording
            cancel_key: Key that, with Ctrl held, terminates the process
            task_manager: Tracker for in-flight sends
        """
        self.send_recording = send_recording
        self.bus = bus
        self.start_key = start_key or settings.capture.start_key
        self.end_key = end_key or settings.capture.end_key
        self.cancel_key = cancel_key or settings.capture.cancel_key
        self.task_manager = task_manager or TaskManager("capture")

        self.session = CaptureSession()
        self._subscriptions = Subscriptions(bus)

    @property
    def state(self) -> CaptureState:
        return self.session.state

    def start(self) -> None:
        """Subscribe to key presses and microphone audio."""
        self._subscriptions.subscribe(EventType.KEY_PRESSED, self._on_key_event)
        self._subscriptions.subscribe(EventType.MIC_AUDIO_CHUNK, self._on_chunk_event)
        logger.info(
            f"Capture controller ready (start={self.start_key}, end={self.end_key}, "
            f"cancel=ctrl+{self.cancel_key})"
        )

    async def stop(self) -> None:
        """Unsubscribe and cancel any sends still in flight."""
        self._subscriptions.close()
        await self.task_manager.cancel_all()

    def handle_key(self, name: str, ctrl: bool = False) -> KeyAction:
        """
        Apply a key press to the session.

        Args:
            name: Key name as decoded by the terminal reader
            ctrl: Whether Ctrl was held

        Returns:
            KeyAction: What happened
        """
        if ctrl and name == self.cancel_key:
            logger.info("Cancel key pressed, requesting shutdown")
            self.bus.emit(EventType.SHUTDOWN, {"reason": "cancel_key"})
            return KeyAction.CANCELLED

        if name == self.start_key:
            restarted = self.session.active
            if restarted:
                logger.info(f"Recording restarted, discarded {self.session.buffered_bytes} bytes")
            else:
                logger.debug("Recording started")
            self.session = start_capture(self.session)
            self.bus.emit(EventType.CAPTURE_STARTED, {"restarted": restarted})
            return KeyAction.STARTED

        if name == self.end_key:
            self.session, recording = end_capture(self.session)
            if recording is None:
                logger.debug(f"End key ignored in state {self.session.state.name}")
                return KeyAction.IGNORED
            self._dispatch(recording)
            return KeyAction.SENT

        return KeyAction.IGNORED

    def handle_chunk(self, chunk: bytes) -> None:
        """Buffer a microphone chunk if a recording is active."""
        self.session = append_chunk(self.session, chunk)

    def _dispatch(self, recording: bytes) -> None:
        duration = get_audio_duration(
            recording,
            settings.audio.sample_rate,
            settings.audio.channels,
            settings.audio.sample_width,
        )
        logger.info(
            f"Sending recording ({len(recording)} bytes, {duration:.2f}s, "
            f"peak {peak_level_dbfs(recording):.1f} dBFS)"
        )
        self.bus.emit(
            EventType.CAPTURE_FLUSHED,
            {"bytes": len(recording), "duration": duration}
        )
        # Not awaited: a new recording may start while this one is in flight
        self.task_manager.create_task(self.send_recording(recording), "send_recording")

    def _on_key_event(self, event: Event) -> None:
        if isinstance(event, KeyPressEvent):
            self.handle_key(event.name, event.ctrl)
        else:
            self.handle_key(event.data.get("name", ""), bool(event.data.get("ctrl", False)))

    def _on_chunk_event(self, event: Event) -> None:
        if isinstance(event, AudioChunkEvent) and event.chunk:
            self.handle_chunk(event.chunk)
