"""
Test suite for the OpenAI Realtime Assistant.

This package contains tests for all components of the application:
- Config: Configuration and environment variable handling
- API Client: Realtime API communication
- Audio Service: Audio recording and playback
- Conversation Manager: Conversation state and flow
- Event System: Event handling and propagation
- Integration: End-to-end flows
- Security: Security features and concerns
- Performance: Performance and resilience
"""

__version__ = "0.1.0"