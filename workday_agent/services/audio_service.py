"""
Audio service for microphone capture and speaker playback.

The microphone stream runs for the whole session and publishes every chunk
on the event bus; deciding which chunks belong to a recording is the
capture controller's job. Agent speech arriving on the bus is queued and
written to the output stream in order.
"""

import asyncio
from enum import Enum
from typing import Any, Dict, List, Optional

import pyaudio

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.events.event_interface import (
    AudioChunkEvent,
    Event,
    EventBus,
    EventType,
    Subscriptions,
    event_bus,
)
from workday_agent.utils.async_helpers import TaskManager
from workday_agent.utils.audio_utilities import validate_audio_format
from workday_agent.utils.error_handling import AudioError, ErrorSeverity

logger = get_logger(__name__)


class AudioState(Enum):
    """Audio service states."""
    IDLE = "idle"
    STREAMING = "streaming"
    ERROR = "error"


class AudioService:
    """
    Service for streaming the microphone and playing back agent speech.

    PyAudio delivers input on its own thread; chunks are handed to the event
    loop with ``emit_threadsafe`` so subscribers always run on the loop.
    """

    def __init__(
        self,
        bus: EventBus = event_bus,
        input_device_index: Optional[int] = None,
        output_device_index: Optional[int] = None,
    ):
        """
        Initialize the audio service.

        Args:
            bus: Event bus to publish microphone chunks on
            input_device_index: Index of the input device to use (None for default)
            output_device_index: Index of the output device to use (None for default)
        """
        self.bus = bus
        self.py_audio: Optional[pyaudio.PyAudio] = None
        self.state = AudioState.IDLE
        self.task_manager = TaskManager("audio_service")
        self._subscriptions = Subscriptions(bus)

        self.input_stream = None
        self.output_stream = None
        self.input_device_index = input_device_index if input_device_index is not None else settings.audio.input_device
        self.output_device_index = output_device_index if output_device_index is not None else settings.audio.output_device

        self.sample_rate = settings.audio.sample_rate
        self.channels = settings.audio.channels
        self.sample_width = settings.audio.sample_width
        self.frames_per_buffer = settings.audio.frames_per_buffer

        self.output_queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _initialize_audio(self) -> None:
        """
        Create the PyAudio instance.

        Raises:
            AudioError: If audio initialization fails
        """
        validate_audio_format(self.sample_rate, self.channels, self.sample_width)
        try:
            self.py_audio = pyaudio.PyAudio()
        except Exception as e:
            raise AudioError(
                f"Failed to initialize audio: {e}",
                severity=ErrorSeverity.ERROR,
                cause=e
            )

    def list_audio_devices(self) -> List[Dict[str, Any]]:
        """
        List available audio input and output devices.

        Returns:
            List of dictionaries with device information
        """
        if not self.py_audio:
            self._initialize_audio()

        devices = []
        for i in range(self.py_audio.get_device_count()):
            device_info = self.py_audio.get_device_info_by_index(i)
            devices.append({
                "index": i,
                "name": device_info.get("name"),
                "maxInputChannels": device_info.get("maxInputChannels"),
                "maxOutputChannels": device_info.get("maxOutputChannels"),
            })
        return devices

    async def start(self) -> None:
        """
        Open the microphone and speaker streams and start playback.

        Raises:
            AudioError: If a stream cannot be opened
        """
        if self.state == AudioState.STREAMING:
            logger.warning("Audio is already streaming")
            return

        if not self.py_audio:
            self._initialize_audio()

        self._loop = asyncio.get_running_loop()

        try:
            self.output_stream = self.py_audio.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                output=True,
                output_device_index=self.output_device_index,
                frames_per_buffer=self.frames_per_buffer
            )
            self.input_stream = self.py_audio.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.input_device_index,
                frames_per_buffer=self.frames_per_buffer,
                stream_callback=self._audio_callback
            )
            self.input_stream.start_stream()
        except Exception as e:
            self.state = AudioState.ERROR
            self._close_streams()
            raise AudioError(
                f"Failed to open audio streams: {e}",
                severity=ErrorSeverity.ERROR,
                cause=e
            )

        self._subscriptions.subscribe(EventType.AGENT_SPEAKER_AUDIO, self._on_speaker_audio)
        self.task_manager.create_task(self._play_audio_queue(), "audio_playback")
        self.state = AudioState.STREAMING
        logger.info("Microphone and speaker streams started")

    def _audio_callback(self, in_data, frame_count, time_info, status):
        """
        Callback for audio input stream.

        This is called by PyAudio in a separate thread.

        Returns:
            tuple: (None, pyaudio.paContinue)
        """
        if in_data and self._loop is not None and not self._loop.is_closed():
            self.bus.emit_threadsafe(
                self._loop,
                AudioChunkEvent(type=EventType.MIC_AUDIO_CHUNK, chunk=in_data)
            )
        return (None, pyaudio.paContinue)

    def _on_speaker_audio(self, event: Event) -> None:
        if isinstance(event, AudioChunkEvent) and event.chunk:
            self.output_queue.put_nowait(event.chunk)

    async def _play_audio_queue(self) -> None:
        """Write queued agent audio to the speaker until cancelled."""
        while True:
            chunk = await self.output_queue.get()
            try:
                if self.output_stream is not None:
                    # write() blocks until the device has consumed the chunk
                    await asyncio.to_thread(self.output_stream.write, chunk)
            except OSError as e:
                logger.error(f"Error writing to audio output: {e}")
            finally:
                self.output_queue.task_done()

    async def stop(self) -> None:
        """Stop both streams and release PyAudio."""
        logger.info("Cleaning up audio resources")
        self._subscriptions.close()
        await self.task_manager.cancel_all()
        self._close_streams()

        if self.py_audio:
            self.py_audio.terminate()
            self.py_audio = None
        self.state = AudioState.IDLE

    def _close_streams(self) -> None:
        for stream in (self.input_stream, self.output_stream):
            if stream is None:
                continue
            try:
                stream.stop_stream()
                stream.close()
            except OSError as e:
                logger.error(f"Error closing audio stream: {e}")
        self.input_stream = None
        self.output_stream = None
