"""
Tests for the application entry point and the component wiring.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tests.conftest import WORKDAY_DATE
from workday_agent.application import Application, main
from workday_agent.config import settings
from workday_agent.events.event_interface import EventType


def test_list_events_command(data_dir, capsys):
    """Test --list-events prints the day's events as JSON."""
    exit_code = main(["--list-events", WORKDAY_DATE, "--data-dir", str(data_dir)])

    events = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [event["title"] for event in events][:2] == ["Daily standup", "Report draft"]


def test_find_event_command(data_dir, capsys):
    """Test --find-event prints the covering event."""
    exit_code = main(["--find-event", "9:45", "--date", WORKDAY_DATE, "--data-dir", str(data_dir)])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["title"] == "Report draft"


def test_lookup_not_found_exits_nonzero(data_dir, capsys):
    """Test a failed lookup prints the failure payload and exits 1."""
    exit_code = main(["--list-events", "2030-01-01", "--data-dir", str(data_dir)])

    assert exit_code == 1
    assert json.loads(capsys.readouterr().out)["success"] is False


def test_find_event_requires_date(data_dir):
    """Test --find-event without --date is a usage error."""
    with pytest.raises(SystemExit):
        main(["--find-event", "09:00", "--data-dir", str(data_dir)])


def test_register_model_command(capsys):
    """Test --register-model registers the given model id."""
    registry = MagicMock()
    registry.register_model = AsyncMock(return_value={"identifier": "llama3.2:3b"})

    with patch("workday_agent.application.ModelRegistryClient", return_value=registry):
        assert main(["--register-model", "llama3.2:3b"]) == 0

    registry.register_model.assert_awaited_once_with("llama3.2:3b")
    assert json.loads(capsys.readouterr().out)["identifier"] == "llama3.2:3b"


def test_list_devices_command(capsys):
    """Test --list-devices prints input and output devices."""
    with patch("workday_agent.services.audio_service.pyaudio.PyAudio") as mock_class:
        mock_class.return_value.get_device_count.return_value = 2
        mock_class.return_value.get_device_info_by_index.side_effect = [
            {"name": "USB Mic", "maxInputChannels": 1, "maxOutputChannels": 0},
            {"name": "Speakers", "maxInputChannels": 0, "maxOutputChannels": 2},
        ]
        assert main(["--list-devices"]) == 0

    out = capsys.readouterr().out
    assert "Input  0: USB Mic" in out
    assert "Output 1: Speakers" in out
    mock_class.return_value.terminate.assert_called_once()


@pytest.fixture
def app(bus, data_dir, monkeypatch):
    monkeypatch.setattr(settings.api, "api_key", "test_api_key")
    application = Application(data_dir=data_dir, bus=bus, input_device=2)
    application.api_client.connect = AsyncMock(return_value=True)
    application.api_client.disconnect = AsyncMock()
    application.audio_service.start = AsyncMock()
    application.audio_service.stop = AsyncMock()
    application.keyboard = MagicMock()
    application.keyboard.start.return_value = True
    return application


@pytest.mark.asyncio
async def test_start_connects_with_session_profile(app):
    """Test start-up connects with Viki's instructions and the lookup tools."""
    assert await app.start() is True

    instructions, tools = app.api_client.connect.await_args.args
    assert "Viki" in instructions
    assert [tool["name"] for tool in tools] == ["get_events", "get_event"]
    app.keyboard.start.assert_called_once()

    await app.stop()
    app.api_client.disconnect.assert_awaited_once()
    app.keyboard.stop.assert_called_once()


@pytest.mark.asyncio
async def test_start_requires_api_key(app, monkeypatch):
    """Test start-up stops before connecting when no API key is set."""
    monkeypatch.setattr(settings.api, "api_key", "")

    assert await app.start() is False
    app.api_client.connect.assert_not_called()


def test_device_choice_reaches_audio_service(app):
    """Test the chosen device index is used for audio."""
    assert app.audio_service.input_device_index == 2


@pytest.mark.asyncio
async def test_start_fails_without_connection(app):
    """Test audio is not started when the connection fails."""
    app.api_client.connect.return_value = False

    assert await app.start() is False
    app.audio_service.start.assert_not_called()


@pytest.mark.asyncio
async def test_cancel_key_shuts_down(bus, app):
    """Test Ctrl+C requests application shutdown."""
    await app.start()

    bus.emit(EventType.KEY_PRESSED, {"name": "c", "ctrl": True})
    await asyncio.wait_for(app.shutdown_event.wait(), timeout=1.0)

    await app.stop()
