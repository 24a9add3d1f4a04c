"""Event bus and event types shared across the application."""

from workday_agent.events.event_interface import (
    AudioChunkEvent,
    ErrorEvent,
    Event,
    EventBus,
    EventType,
    KeyPressEvent,
    Subscriptions,
    TranscriptEvent,
    event_bus,
)

__all__ = [
    "AudioChunkEvent",
    "ErrorEvent",
    "Event",
    "EventBus",
    "EventType",
    "KeyPressEvent",
    "Subscriptions",
    "TranscriptEvent",
    "event_bus",
]
