"""
Raw-mode terminal key reader.

Puts the controlling terminal in cbreak mode so single key presses arrive
immediately, decodes them into key names and publishes them on the event
bus. Ctrl+C is delivered as a key press (``c`` with ``ctrl``) rather than
SIGINT, so the capture controller sees it like any other binding.
"""

import asyncio
import os
import sys
import termios
import tty
from typing import List, Optional, TextIO, Tuple

from workday_agent.config.logging_config import get_logger
from workday_agent.events.event_interface import EventBus, EventType, KeyPressEvent, event_bus

logger = get_logger(__name__)

_NAMED_KEYS = {
    " ": "space",
    "\r": "return",
    "\n": "return",
    "\t": "tab",
    "\x7f": "backspace",
}


def _escape_sequence_length(data: str, start: int) -> int:
    """Length of the escape sequence starting at ``data[start]``."""
    end = start + 1
    # CSI (ESC [) and SS3 (ESC O) run up to a final byte in @..~
    if end < len(data) and data[end] in "[O":
        end += 1
        while end < len(data) and not "@" <= data[end] <= "~":
            end += 1
        end += 1
    return min(end, len(data)) - start


def decode_keys(data: str) -> List[Tuple[str, bool]]:
    """
    Decode terminal input into ``(name, ctrl)`` key presses.

    An escape sequence (arrow keys, function keys) is read as a single
    ``escape`` press; keys read together with it are still decoded.
    """
    keys = []
    index = 0
    while index < len(data):
        char = data[index]
        if char == "\x1b":
            keys.append(("escape", False))
            index += _escape_sequence_length(data, index)
            continue
        index += 1

        if char in _NAMED_KEYS:
            keys.append((_NAMED_KEYS[char], False))
        elif "\x01" <= char <= "\x1a":
            keys.append((chr(ord(char) + 96), True))
        elif char.isprintable():
            keys.append((char.lower(), False))
    return keys


def _set_cbreak_mode(fd: int) -> list:
    old = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    # Keep Ctrl+C as input instead of SIGINT
    attrs = termios.tcgetattr(fd)
    attrs[3] &= ~termios.ISIG
    termios.tcsetattr(fd, termios.TCSANOW, attrs)
    return old


def _restore_mode(fd: int, old: list) -> None:
    termios.tcsetattr(fd, termios.TCSADRAIN, old)


class KeyboardReader:
    """Publishes key presses from a TTY on ``KEY_PRESSED``."""

    def __init__(self, bus: EventBus = event_bus, stream: Optional[TextIO] = None):
        self.bus = bus
        self.stream = stream or sys.stdin
        self._fd: Optional[int] = None
        self._old_attrs: Optional[list] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def active(self) -> bool:
        return self._fd is not None

    def start(self) -> bool:
        """
        Start reading keys.

        Returns:
            bool: False when the input is not a terminal; keys are then
            disabled and the rest of the application keeps running.
        """
        if not self.stream.isatty():
            logger.info("Standard input is not a terminal, keyboard control disabled")
            return False

        fd = self.stream.fileno()
        self._loop = asyncio.get_running_loop()
        self._old_attrs = _set_cbreak_mode(fd)
        self._loop.add_reader(fd, self._on_readable)
        self._fd = fd
        logger.debug("Keyboard reader started")
        return True

    def stop(self) -> None:
        """Stop reading and restore the terminal."""
        if self._fd is None:
            return

        self._loop.remove_reader(self._fd)
        _restore_mode(self._fd, self._old_attrs)
        self._fd = None
        logger.debug("Keyboard reader stopped, terminal restored")

    def _on_readable(self) -> None:
        data = os.read(self._fd, 64)
        if not data:
            logger.info("Keyboard input closed")
            self._loop.remove_reader(self._fd)
            return

        for name, ctrl in decode_keys(data.decode("utf-8", errors="ignore")):
            self.bus.emit(KeyPressEvent(type=EventType.KEY_PRESSED, name=name, ctrl=ctrl))
