"""
API client for the OpenAI Realtime API.

This module holds the websocket session with the realtime model: it opens
the connection, configures a push-to-talk session, sends finished
recordings and tool outputs, and forwards every server event to the
``RealtimeEventHandler``.
"""

import asyncio
import base64
import json
import uuid
from typing import Any, Dict, List, Optional, Union

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.events.event_interface import EventBus, EventType, event_bus
from workday_agent.services.realtime_event_handler import RealtimeEventHandler
from workday_agent.utils.async_helpers import TaskManager, wait_for_event
from workday_agent.utils.audio_utilities import split_audio_chunks
from workday_agent.utils.error_handling import ApiError, ErrorSeverity

logger = get_logger(__name__)

# The API rejects single messages above 15MB; base64 adds a third on top
MAX_APPEND_BYTES = 256 * 1024


class RealtimeClient:
    """
    Client for the OpenAI Realtime API over a websocket.

    Turn detection is disabled: the server only answers after a recording
    has been appended, committed and a response explicitly requested.
    """

    def __init__(
        self,
        event_handler: Optional[RealtimeEventHandler] = None,
        bus: EventBus = event_bus,
    ):
        """
        Initialize the Realtime API client.

        Args:
            event_handler: Handler for server events (one is created if omitted)
            bus: Event bus for connection events
        """
        self.api_key = settings.api.api_key
        self.bus = bus

        self.session_id: Optional[str] = None
        self.connected = False

        self.ws: Optional[ClientConnection] = None
        self.task_manager = TaskManager("realtime_client")
        self._session_created = asyncio.Event()

        self.event_handler = event_handler or RealtimeEventHandler(bus=bus)
        self.event_handler.set_client(self)

    @property
    def url(self) -> str:
        return f"{settings.api.base_url}?model={settings.api.model}"

    def build_session_config(
        self,
        instructions: str,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Session configuration for push-to-talk conversations.

        Args:
            instructions: System prompt
            tools: Function tools the model may call
        """
        session_config = {
            "modalities": ["audio", "text"],
            "instructions": instructions,
            "voice": settings.api.voice,
            "input_audio_format": "pcm16",
            "output_audio_format": "pcm16",
            "input_audio_transcription": {"model": settings.api.transcription_model},
            "turn_detection": None,
        }
        if tools:
            session_config["tools"] = tools
            session_config["tool_choice"] = "auto"
        return session_config

    async def connect(
        self,
        instructions: str = "",
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> bool:
        """
        Connect to the OpenAI Realtime API and configure the session.

        Args:
            instructions: System prompt for the session
            tools: Function tools the model may call

        Returns:
            bool: True if the connection was successful
        """
        if self.connected:
            logger.warning("Already connected to OpenAI Realtime API")
            return True

        logger.info(f"Connecting to OpenAI Realtime API with model {settings.api.model}")
        self._session_created.clear()

        try:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "OpenAI-Beta": "realtime=v1",
            }
            self.ws = await connect(
                self.url,
                additional_headers=headers,
                max_size=None,
                ping_interval=30,
                ping_timeout=10,
            )
            self.connected = True

            self.task_manager.create_task(self._message_handler(), "websocket_message_handler")

            if not await wait_for_event(self._session_created, settings.api.connect_timeout):
                raise ApiError(
                    "Timed out waiting for session.created event",
                    severity=ErrorSeverity.ERROR
                )

            if not await self.update_session(self.build_session_config(instructions, tools)):
                raise ApiError(
                    "Failed to update session configuration",
                    severity=ErrorSeverity.ERROR
                )

            logger.info("Successfully connected to OpenAI Realtime API")
            self.bus.emit(EventType.CONNECTION_ESTABLISHED, {"session_id": self.session_id})
            return True

        except Exception as e:
            await self.disconnect()

            error = ApiError(
                f"Failed to connect to OpenAI Realtime API: {e}",
                severity=ErrorSeverity.ERROR,
                cause=e
            )
            logger.error(str(error))
            self.bus.emit(EventType.ERROR, {"error": error.to_dict()})
            return False

    def mark_session_created(self, session_id: Optional[str]) -> None:
        """Record the server's session id and release ``connect``."""
        self.session_id = session_id
        self._session_created.set()

    async def disconnect(self) -> None:
        """Close the websocket and stop the receive loop."""
        was_connected = self.connected
        self.connected = False

        if self.ws:
            try:
                await self.ws.close()
                logger.info("Disconnected from OpenAI Realtime API")
            except Exception as e:
                logger.error(f"Error closing WebSocket connection: {e}")
            finally:
                self.ws = None

        await self.task_manager.cancel_all()

        if was_connected:
            self.bus.emit(EventType.CONNECTION_CLOSED, {"session_id": self.session_id})
        self.session_id = None

    async def send_audio(self, recording: bytes) -> bool:
        """
        Send a finished recording and ask the model to answer it.

        The recording is appended in chunks, committed as one user turn and
        followed by ``response.create``.

        Args:
            recording: 16-bit PCM, 24kHz, mono

        Returns:
            bool: True if every message was sent
        """
        if not self.is_connected:
            logger.error("Cannot send audio: not connected")
            return False

        if not recording:
            logger.warning("Cannot send empty audio data")
            return False

        for chunk in split_audio_chunks(recording, MAX_APPEND_BYTES):
            sent = await self._send_event({
                "type": "input_audio_buffer.append",
                "audio": base64.b64encode(chunk).decode("utf-8"),
            })
            if not sent:
                return False

        if not await self._send_event({"type": "input_audio_buffer.commit"}):
            return False

        logger.debug(f"Committed recording of {len(recording)} bytes")
        return await self.request_response()

    async def request_response(self) -> bool:
        """Ask the model to generate its next response."""
        sent = await self._send_event({"type": "response.create"})
        if sent:
            logger.info("Requested response from assistant")
        return sent is not None

    async def submit_function_call_output(self, call_id: str, output: Union[str, Any]) -> bool:
        """
        Return the result of a tool call to the conversation.

        Args:
            call_id: The ID of the function call
            output: JSON-serializable result, or an already encoded string

        Returns:
            bool: True if submission was successful
        """
        output_str = output if isinstance(output, str) else json.dumps(output)
        sent = await self._send_event({
            "type": "conversation.item.create",
            "item": {
                "type": "function_call_output",
                "call_id": call_id,
                "output": output_str
            }
        })
        if sent:
            logger.info(f"Submitted output for function call {call_id}")
        return sent is not None

    async def update_session(self, session_config: Dict[str, Any]) -> bool:
        """
        Update the session configuration.

        Args:
            session_config: New session configuration

        Returns:
            bool: True if the update was sent
        """
        sent = await self._send_event({"type": "session.update", "session": session_config})
        return sent is not None

    async def _send_event(self, event: Dict[str, Any]) -> Optional[str]:
        """
        Send a client event.

        Args:
            event: Event data to send

        Returns:
            Optional[str]: Event ID if sent successfully, None otherwise
        """
        if not self.is_connected:
            logger.error(f"Cannot send {event.get('type')}: not connected")
            return None

        event.setdefault("event_id", f"evt_{uuid.uuid4().hex}")
        try:
            await self.ws.send(json.dumps(event))
        except Exception as e:
            logger.error(f"Error sending event {event.get('type')}: {e}")
            return None

        logger.debug(f"Sent event: {event['type']} (id: {event['event_id']})")
        return event["event_id"]

    async def _message_handler(self) -> None:
        """Receive loop; runs until the socket closes or the task is cancelled."""
        try:
            async for message in self.ws:
                await self._process_message(message)
        except ConnectionClosedOK as e:
            logger.info(f"WebSocket connection closed normally: {e}")
        except ConnectionClosedError as e:
            logger.warning(f"WebSocket connection closed unexpectedly: {e}")
            self.bus.emit(EventType.ERROR, {"error": {"message": str(e), "type": "connection_closed"}})
        finally:
            if self.connected:
                self.connected = False
                self.bus.emit(EventType.CONNECTION_CLOSED, {"session_id": self.session_id})

    async def _process_message(self, message: Union[str, bytes]) -> None:
        """
        Decode one server message and hand it to the event handler.

        Args:
            message: Raw message from WebSocket
        """
        try:
            if isinstance(message, bytes):
                message = message.decode("utf-8")
            data = json.loads(message)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Error decoding server message: {e}")
            return

        await self.event_handler.handle_event(data.get("type", ""), data)

    @property
    def is_connected(self) -> bool:
        """Check if client is currently connected and active."""
        return self.connected and self.ws is not None
