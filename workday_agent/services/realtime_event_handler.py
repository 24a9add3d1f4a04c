"""
OpenAI Realtime API event handler.

Maps server events received over the websocket to application events on the
bus: agent speech audio, transcript text, turn completion and errors. Tool
calls requested by the model are executed here and their output is sent
back through the client.
"""

import base64
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.events.event_interface import (
    AudioChunkEvent,
    ErrorEvent,
    Event,
    EventBus,
    EventType,
    TranscriptEvent,
    event_bus,
)
from workday_agent.services.tool_dispatcher import ToolDispatcher

logger = get_logger(__name__)

ServerEventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class RealtimeEventHandler:
    """
    Handler for processing OpenAI Realtime API server events.

    Only the events the voice agent reacts to have handlers; everything else
    is logged at debug level and dropped.
    """

    def __init__(
        self,
        client_ref=None,
        tool_dispatcher: Optional[ToolDispatcher] = None,
        bus: EventBus = event_bus,
    ):
        """
        Initialize the event handler.

        Args:
            client_ref: The RealtimeClient used to answer tool calls
            tool_dispatcher: Executes the workday tools
            bus: Event bus to publish on
        """
        self.client = client_ref
        self.tool_dispatcher = tool_dispatcher or ToolDispatcher()
        self.bus = bus
        # Call ids whose output was submitted, until their response is done
        self._submitted_calls: Set[str] = set()

        self.event_handlers: Dict[str, ServerEventHandler] = {
            "session.created": self.handle_session_created,
            "session.updated": self.handle_session_updated,
            "conversation.item.input_audio_transcription.completed": self.handle_user_transcript,
            "conversation.item.input_audio_transcription.failed": self.handle_transcription_failed,
            "response.audio.delta": self.handle_audio_delta,
            "response.audio_transcript.done": self.handle_audio_transcript_done,
            "response.function_call_arguments.done": self.handle_function_call_arguments_done,
            "response.done": self.handle_response_done,
            "error": self.handle_error,
        }

    def set_client(self, client_ref) -> None:
        self.client = client_ref

    async def handle_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
        """
        Process one server event.

        Args:
            event_type: The ``type`` field of the server event
            event_data: The full decoded event
        """
        handler = self.event_handlers.get(event_type)
        if handler is None:
            if settings.debug_mode:
                logger.debug(f"No handler for server event: {event_type}")
            return

        log_level = logging.INFO if event_type.startswith("session.") else logging.DEBUG
        logger.log(log_level, f"Processing event: {event_type}")

        try:
            await handler(event_data)
        except Exception as e:
            logger.error(f"Error handling event {event_type}: {e}", exc_info=True)
            self.bus.emit(ErrorEvent(
                type=EventType.ERROR,
                error={
                    "message": f"Error handling event {event_type}: {e}",
                    "type": "event_handler_error"
                }
            ))

    # Session events

    async def handle_session_created(self, event_data: Dict[str, Any]) -> None:
        session_id = event_data.get("session", {}).get("id")
        if self.client is not None:
            self.client.mark_session_created(session_id)
        logger.info(f"Session created: {session_id}")
        self.bus.emit(Event(type=EventType.SESSION_CREATED, data={"session_id": session_id}))

    async def handle_session_updated(self, event_data: Dict[str, Any]) -> None:
        session = event_data.get("session", {})
        logger.debug(f"Session updated: voice={session.get('voice')}, tools={len(session.get('tools', []))}")
        self.bus.emit(Event(type=EventType.SESSION_UPDATED, data={"session_id": session.get("id")}))

    # Transcripts

    async def handle_user_transcript(self, event_data: Dict[str, Any]) -> None:
        """What the user said, as recognized by the transcription model."""
        self._emit_writing(event_data.get("transcript", ""), "user")

    async def handle_transcription_failed(self, event_data: Dict[str, Any]) -> None:
        error = event_data.get("error", {})
        logger.warning(f"Transcription failed: {error.get('message', 'Unknown error')}")

    async def handle_audio_transcript_done(self, event_data: Dict[str, Any]) -> None:
        """Full text of what the agent just said."""
        self._emit_writing(event_data.get("transcript", ""), "assistant")

    def _emit_writing(self, text: str, role: str) -> None:
        self.bus.emit(TranscriptEvent(type=EventType.AGENT_WRITING, text=text, role=role))

    # Audio

    async def handle_audio_delta(self, event_data: Dict[str, Any]) -> None:
        """
        Handle audio delta event.

        Args:
            event_data: Event data with base64 PCM16 audio in ``delta``
        """
        audio_data = event_data.get("delta", "")
        if not audio_data:
            return

        self.bus.emit(AudioChunkEvent(
            type=EventType.AGENT_SPEAKER_AUDIO,
            data={"response_id": event_data.get("response_id")},
            chunk=base64.b64decode(audio_data)
        ))

    # Responses and tool calls

    async def handle_function_call_arguments_done(self, event_data: Dict[str, Any]) -> None:
        """
        Execute a completed tool call and return its output to the conversation.

        The model is asked to continue only once the response carrying the
        call is done, so several calls in one response share a single
        follow-up response.

        Args:
            event_data: Event data with ``call_id``, ``name`` and ``arguments``
        """
        call_id = event_data.get("call_id")
        function_name = event_data.get("name", "")
        arguments = event_data.get("arguments", "")

        if not call_id:
            logger.warning(f"Function call {function_name} arrived without a call_id")
            return

        logger.info(f"Function call received: {function_name}")
        self.bus.emit(
            EventType.FUNCTION_CALL_RECEIVED,
            {"function_name": function_name, "arguments": arguments, "call_id": call_id}
        )

        output = await self.tool_dispatcher.dispatch(function_name, arguments)

        if self.client is None:
            logger.error(f"No client to return output of {function_name} to")
            return

        submitted = await self.client.submit_function_call_output(call_id, output)
        if submitted:
            self._submitted_calls.add(call_id)

        self.bus.emit(
            EventType.FUNCTION_CALL_EXECUTED,
            {"function_name": function_name, "call_id": call_id, "submitted": submitted}
        )

    async def handle_response_done(self, event_data: Dict[str, Any]) -> None:
        """
        Signal the end of the agent's turn.

        A response that requested tool calls is not the end of the turn: one
        follow-up response is requested once their outputs are submitted, and
        that response ends the turn.
        """
        response = event_data.get("response", {})
        outputs = response.get("output", []) or []
        call_ids = {item.get("call_id") for item in outputs if item.get("type") == "function_call"}
        if call_ids:
            answered = call_ids & self._submitted_calls
            self._submitted_calls -= call_ids
            logger.debug(f"Response {response.get('id')} ended with {len(call_ids)} tool call(s)")
            if answered and self.client is not None:
                await self.client.request_response()
            return

        logger.debug(f"Response completed: {response.get('id')}")
        self.bus.emit(
            EventType.AGENT_RESPONSE_DONE,
            {"response_id": response.get("id"), "status": response.get("status")}
        )

    async def handle_error(self, event_data: Dict[str, Any]) -> None:
        """
        Handle error event.

        Args:
            event_data: Event data
        """
        error = event_data.get("error", event_data)
        error_type = error.get("type", "unknown_error")
        error_code = error.get("code") or "unknown"
        error_message = error.get("message", "Unknown error")

        if "rate_limit" in error_code:
            logger.warning(f"API rate limit error: {error_message}")
        else:
            logger.error(f"API error: {error_type} ({error_code}): {error_message}")

        self.bus.emit(ErrorEvent(
            type=EventType.ERROR,
            error={
                "type": error_type,
                "code": error_code,
                "message": error_message,
                "event_id": error.get("event_id")
            }
        ))
