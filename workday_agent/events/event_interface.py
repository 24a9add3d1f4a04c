"""
Event interface for the Workday Voice Agent.

This module defines the event types that flow between the keyboard,
microphone, capture controller, realtime agent client and terminal UI, and
the event bus that connects them. Every event type is a named channel;
components subscribe at startup and unsubscribe at shutdown.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from workday_agent.config.logging_config import get_logger

logger = get_logger(__name__)


class EventType(Enum):
    """Channels that can be published on the event bus."""

    # System events
    ERROR = "error"
    SHUTDOWN = "shutdown"

    # Terminal input
    KEY_PRESSED = "key.pressed"

    # Microphone input
    MIC_AUDIO_CHUNK = "mic.audio.chunk"

    # Push-to-talk capture
    CAPTURE_STARTED = "capture.started"
    CAPTURE_FLUSHED = "capture.flushed"

    # Realtime connection
    CONNECTION_ESTABLISHED = "connection.established"
    CONNECTION_CLOSED = "connection.closed"
    SESSION_CREATED = "session.created"
    SESSION_UPDATED = "session.updated"

    # Agent output
    AGENT_SPEAKER_AUDIO = "agent.speaker"
    AGENT_WRITING = "agent.writing"
    AGENT_RESPONSE_DONE = "agent.response.done"

    # Tool calls
    FUNCTION_CALL_RECEIVED = "function_call.received"
    FUNCTION_CALL_EXECUTED = "function_call.executed"

    # Catch-all for unknown events
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, event_type_str: str) -> 'EventType':
        """Convert a channel name to an EventType, UNKNOWN if there is none."""
        for event_type in cls:
            if event_type.value == event_type_str:
                return event_type
        return cls.UNKNOWN


@dataclass
class Event:
    """Base class for all events in the system."""

    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    created_at: float = field(default_factory=time.time)


@dataclass
class AudioChunkEvent(Event):
    """Event carrying a chunk of raw PCM audio (microphone or agent speaker)."""

    chunk: bytes = b""


@dataclass
class KeyPressEvent(Event):
    """A decoded key press from the terminal."""

    name: str = ""
    ctrl: bool = False

    def __post_init__(self):
        self.data.update({"name": self.name, "ctrl": self.ctrl})


@dataclass
class TranscriptEvent(Event):
    """Transcript text written by the agent or recognized from the user."""

    text: str = ""
    role: str = "assistant"

    def __post_init__(self):
        self.data.update({"text": self.text, "role": self.role})


@dataclass
class ErrorEvent(Event):
    """Event for error conditions."""

    error: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.error and "error" not in self.data:
            self.data["error"] = self.error


# Type for event handlers; coroutine functions are scheduled as tasks
EventHandler = Callable[[Event], Any]


class EventBus:
    """
    Central event bus for the application.

    Manages publication and subscription using the observer pattern.
    Synchronous handlers run inline, in registration order; coroutine
    handlers are scheduled on the running loop. A failing handler is logged
    and does not stop delivery to the others.
    """

    def __init__(self):
        """Initialize the event bus."""
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._pending: set = set()

    def on(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        """
        Register a handler for a specific event type.

        Args:
            event_type: The type of event to handle
            handler: The handler function to call when the event occurs
        """
        if isinstance(event_type, str):
            event_type = EventType.from_string(event_type)

        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered handler for event type: {event_type.name}")

    def on_any(self, handler: EventHandler) -> None:
        """
        Register a handler for all event types.

        Args:
            handler: The handler function to call for any event
        """
        if handler not in self._global_handlers:
            self._global_handlers.append(handler)
            logger.debug("Registered global event handler")

    def off(self, event_type: Union[EventType, str], handler: Optional[EventHandler] = None) -> None:
        """
        Remove a handler for a specific event type.

        Args:
            event_type: The type of event
            handler: The handler to remove. If None, removes all handlers for the event type.
        """
        if isinstance(event_type, str):
            event_type = EventType.from_string(event_type)

        if event_type not in self._handlers:
            return

        if handler is None:
            self._handlers[event_type] = []
            logger.debug(f"Removed all handlers for event type: {event_type.name}")
        elif handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)
            logger.debug(f"Removed handler for event type: {event_type.name}")

    def off_any(self, handler: Optional[EventHandler] = None) -> None:
        """
        Remove a global handler.

        Args:
            handler: The handler to remove. If None, removes all global handlers.
        """
        if handler is None:
            self._global_handlers = []
        elif handler in self._global_handlers:
            self._global_handlers.remove(handler)

    def handler_count(self, event_type: EventType) -> int:
        """Number of handlers subscribed to a channel."""
        return len(self._handlers.get(event_type, []))

    def emit(self, event_type: Union[EventType, str, Event], data: Optional[Dict[str, Any]] = None) -> None:
        """
        Emit an event to all registered handlers.

        Args:
            event_type: The event type or Event object
            data: The event data (if event_type is not an Event)
        """
        if isinstance(event_type, Event):
            event = event_type
        else:
            if isinstance(event_type, str):
                event_type = EventType.from_string(event_type)
            event = Event(type=event_type, data=data or {})

        # Copy so handlers may unsubscribe while being called
        handlers = list(self._handlers.get(event.type, []))
        for handler in handlers + list(self._global_handlers):
            self._call_handler(handler, event)

    def emit_threadsafe(self, loop: asyncio.AbstractEventLoop, event: Event) -> None:
        """
        Emit an event from a foreign thread onto the given loop.

        Handlers still run on the loop thread, one at a time.
        """
        loop.call_soon_threadsafe(self.emit, event)

    def _call_handler(self, handler: EventHandler, event: Event) -> None:
        try:
            if asyncio.iscoroutinefunction(handler):
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    logger.warning(f"Cannot run async handler {handler.__name__}: no running event loop")
                    return
                task = loop.create_task(self._call_async_handler(handler, event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
            else:
                handler(event)
        except Exception as e:
            logger.error(f"Error in event handler for {event.type.name}: {e}", exc_info=True)

    async def _call_async_handler(self, handler: EventHandler, event: Event) -> None:
        try:
            await handler(event)
        except Exception as e:
            logger.error(f"Error in async event handler for {event.type.name}: {e}", exc_info=True)


class Subscriptions:
    """
    A group of subscriptions owned by one component.

    Components subscribe through the group at startup and call ``close()``
    at shutdown, which unsubscribes everything they registered.
    """

    def __init__(self, bus: EventBus):
        self.bus = bus
        self._registered: List[Tuple[EventType, EventHandler]] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        self.bus.on(event_type, handler)
        self._registered.append((event_type, handler))

    def close(self) -> None:
        for event_type, handler in self._registered:
            self.bus.off(event_type, handler)
        self._registered = []

    def __len__(self) -> int:
        return len(self._registered)


# Global event bus instance
event_bus = EventBus()
