"""
Tests for the terminal layer: key decoding, the keyboard reader and the
printed conversation.
"""

import io

import pytest

from workday_agent.events.event_interface import EventType, TranscriptEvent
from workday_agent.presentation.cli import CliInterface, key_label
from workday_agent.presentation.keyboard import KeyboardReader, decode_keys


@pytest.mark.parametrize("data, keys", [
    (" ", [("space", False)]),
    ("\r", [("return", False)]),
    ("\n", [("return", False)]),
    ("\t", [("tab", False)]),
    ("\x03", [("c", True)]),
    ("Q", [("q", False)]),
    ("\x1b[A", [("escape", False)]),
    ("\x1b[A ", [("escape", False), ("space", False)]),
    ("\x1b[1;5C\r", [("escape", False), ("return", False)]),
    ("\x1bOP x", [("escape", False), ("space", False), ("x", False)]),
    ("\x1b", [("escape", False)]),
    ("a b", [("a", False), ("space", False), ("b", False)]),
])
def test_decode_keys(data, keys):
    """Test terminal input decodes into key presses."""
    assert decode_keys(data) == keys


def test_key_label():
    """Test key names are shown as the labels users know."""
    assert key_label("return") == "ENTER"
    assert key_label("space") == "SPACE"


def test_keyboard_reader_without_terminal(bus):
    """Test keyboard control is disabled when input is not a terminal."""
    reader = KeyboardReader(bus=bus, stream=io.StringIO())

    assert reader.start() is False
    assert not reader.active
    reader.stop()


@pytest.fixture
def cli(bus):
    interface = CliInterface(bus=bus, color_output=False)
    interface.start()
    yield interface
    interface.stop()


def test_transcript_lines(bus, cli, capsys):
    """Test transcript lines are printed with their role and blank ones skipped."""
    bus.emit(TranscriptEvent(type=EventType.AGENT_WRITING, text="What's next today?", role="user"))
    bus.emit(TranscriptEvent(type=EventType.AGENT_WRITING, text="Lunch at 12:30.", role="assistant"))
    bus.emit(TranscriptEvent(type=EventType.AGENT_WRITING, text="   ", role="assistant"))

    lines = capsys.readouterr().out.splitlines()

    assert lines == ["user: What's next today?", "assistant: Lunch at 12:30."]


def test_capture_and_turn_prompts(bus, cli, capsys):
    """Test the recording, sending and turn-completion prompts."""
    bus.emit(EventType.CAPTURE_STARTED, {"restarted": False})
    bus.emit(EventType.CAPTURE_FLUSHED, {"bytes": 4800, "duration": 0.1})
    bus.emit(EventType.AGENT_RESPONSE_DONE, {"response_id": "r1"})

    out = capsys.readouterr().out

    assert "RECORDING... (Press ENTER when done)" in out
    assert "Sending audio to Viki..." in out
    assert "Viki finished. Press SPACE to talk, ENTER to submit" in out


def test_errors_are_printed(bus, cli, capsys):
    """Test errors are printed with their type."""
    bus.emit(EventType.ERROR, {"error": {"type": "invalid_request_error", "message": "Audio too short"}})

    assert "Error (invalid_request_error): Audio too short" in capsys.readouterr().out


def test_stop_unsubscribes(bus, cli, capsys):
    """Test nothing is printed after the interface stops."""
    cli.stop()

    bus.emit(TranscriptEvent(type=EventType.AGENT_WRITING, text="hello", role="user"))

    assert capsys.readouterr().out == ""


def test_display_instructions(bus, capsys):
    """Test the key instructions and the no-terminal notice."""
    interface = CliInterface(bus=bus, color_output=False)

    interface.display_instructions(True)
    interface.display_instructions(False)

    out = capsys.readouterr().out
    assert "HOLD SPACE to record" in out
    assert "PRESS ENTER to send" in out
    assert "Keyboard control unavailable" in out
