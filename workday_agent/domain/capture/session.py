"""
Push-to-talk capture session.

A ``CaptureSession`` is the whole state of the push-to-talk recorder: whether
a recording is active and the microphone chunks gathered so far. The
transition functions take the session, update it and hand it back, so the
owner always holds the current value explicitly.

    Idle --start--> Recording (buffer cleared)
    Recording --start--> Recording (buffer cleared again)
    Recording --chunk--> Recording (chunk appended)
    Recording --end, buffer non-empty--> Idle (recording flushed)
    Recording --end, buffer empty--> Recording (nothing happens)
    Idle --end / chunk--> Idle (nothing happens)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple


class CaptureState(Enum):
    IDLE = auto()
    RECORDING = auto()


@dataclass
class CaptureSession:
    """Recording flag plus the ordered microphone chunks buffered while it is set."""

    active: bool = False
    buffer: List[bytes] = field(default_factory=list)

    @property
    def state(self) -> CaptureState:
        return CaptureState.RECORDING if self.active else CaptureState.IDLE

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self.buffer)


def start_capture(session: CaptureSession) -> CaptureSession:
    """Begin (or restart) a recording with an empty buffer."""
    session.active = True
    session.buffer = []
    return session


def append_chunk(session: CaptureSession, chunk: bytes) -> CaptureSession:
    """Buffer ``chunk`` if recording; chunks arriving while idle are dropped."""
    if session.active:
        session.buffer.append(chunk)
    return session


def end_capture(session: CaptureSession) -> Tuple[CaptureSession, Optional[bytes]]:
    """
    Finish the recording.

    Returns:
        The session and the concatenated recording, or None when there was
        nothing to send (idle, or recording with an empty buffer). In that
        case the session is left exactly as it was.
    """
    if not session.active or not session.buffer:
        return session, None

    recording = b"".join(session.buffer)
    session.active = False
    session.buffer = []
    return session, recording
