"""
Function tool dispatcher.

Executes the workday tools the model calls and serializes their results to
the JSON payloads sent back as ``function_call_output``. Every outcome,
including unknown tools and malformed arguments, becomes a payload; nothing
is raised to the caller.
"""

import json
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from workday_agent.config.logging_config import get_logger
from workday_agent.domain.schedule import EventQueryService, NotFound

logger = get_logger(__name__)

ToolPayload = Union[Dict[str, Any], list]


class ToolDispatcher:
    """Maps tool names to event query operations."""

    def __init__(self, query_service: Optional[EventQueryService] = None):
        """
        Initialize the dispatcher.

        Args:
            query_service: Service answering the lookups
        """
        self.query_service = query_service or EventQueryService()
        self._tools: Dict[str, Callable[[Dict[str, Any]], Awaitable[ToolPayload]]] = {
            "get_events": self._get_events,
            "get_event": self._get_event,
        }

    async def dispatch(self, name: str, arguments: Union[str, Dict[str, Any], None]) -> ToolPayload:
        """
        Run a tool call.

        Args:
            name: Tool name as declared in the session
            arguments: JSON-encoded arguments string or an already decoded dict

        Returns:
            The JSON-serializable payload for the model
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Model called unknown tool: {name}")
            return {"success": False, "message": f"Unknown tool: {name}"}

        args = self._decode_arguments(arguments)
        if args is None:
            return self._failure(name, "Invalid arguments: expected a JSON object")

        logger.info(f"Executing tool {name} with {args}")
        return await tool(args)

    async def _get_events(self, args: Dict[str, Any]) -> ToolPayload:
        date = args.get("date")
        if not isinstance(date, str):
            return self._failure("get_events", "Missing required argument: date")

        result = await self.query_service.list_events(date)
        if isinstance(result, NotFound):
            return self._failure("get_events", result.message)
        return [event.to_payload() for event in result.value]

    async def _get_event(self, args: Dict[str, Any]) -> ToolPayload:
        time, date = args.get("time"), args.get("date")
        if not isinstance(time, str) or not isinstance(date, str):
            return self._failure("get_event", "Missing required arguments: time and date")

        result = await self.query_service.find_event_at(time, date)
        if isinstance(result, NotFound):
            return self._failure("get_event", result.message)
        return result.value.to_payload()

    @staticmethod
    def _decode_arguments(arguments: Union[str, Dict[str, Any], None]) -> Optional[Dict[str, Any]]:
        if arguments is None or arguments == "":
            return {}
        if isinstance(arguments, dict):
            return arguments
        try:
            decoded = json.loads(arguments)
        except (TypeError, json.JSONDecodeError):
            logger.warning(f"Could not decode tool arguments: {arguments!r}")
            return None
        return decoded if isinstance(decoded, dict) else None

    @staticmethod
    def _failure(name: str, message: str) -> Dict[str, Any]:
        # get_event reports "found", get_events reports "success"
        if name == "get_event":
            return {"found": False, "message": message}
        return {"success": False, "message": message}
