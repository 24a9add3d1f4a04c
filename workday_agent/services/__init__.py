"""
Service layer for the Workday Voice Agent.

This module contains the components that talk to the outside world:
the OpenAI Realtime websocket, the Llama Stack model registry, the audio
devices, and the dispatcher that runs the workday tools for the model.
"""

from workday_agent.services.api_client import RealtimeClient
from workday_agent.services.audio_service import AudioService, AudioState
from workday_agent.services.model_registry import ModelRegistryClient
from workday_agent.services.realtime_event_handler import RealtimeEventHandler
from workday_agent.services.tool_dispatcher import ToolDispatcher

__all__ = [
    'AudioService',
    'AudioState',
    'ModelRegistryClient',
    'RealtimeClient',
    'RealtimeEventHandler',
    'ToolDispatcher',
]
