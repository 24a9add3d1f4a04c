"""Push-to-talk capture: session state and the controller that drives it."""

from workday_agent.domain.capture.controller import CaptureController, KeyAction
from workday_agent.domain.capture.session import (
    CaptureSession,
    CaptureState,
    append_chunk,
    end_capture,
    start_capture,
)

__all__ = [
    "CaptureController",
    "CaptureSession",
    "CaptureState",
    "KeyAction",
    "append_chunk",
    "end_capture",
    "start_capture",
]
