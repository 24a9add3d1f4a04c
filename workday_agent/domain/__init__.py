"""
Domain logic module for the Workday Voice Agent.

This package contains the core logic organized by domain areas:
- capture: push-to-talk recording state and its controller
- schedule: workday documents and the event lookups over them

The domain layer does not talk to the network or the audio hardware;
it publishes and consumes events and calls injected collaborators.
"""

from workday_agent.domain.capture import CaptureController, CaptureSession, CaptureState, KeyAction
from workday_agent.domain.schedule import CalendarEvent, EventQueryService, NotFound, Ok

__all__ = [
    # Capture domain
    'CaptureController',
    'CaptureSession',
    'CaptureState',
    'KeyAction',

    # Schedule domain
    'CalendarEvent',
    'EventQueryService',
    'NotFound',
    'Ok',
]
