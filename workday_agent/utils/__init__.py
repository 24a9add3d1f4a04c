"""
Utility modules for the Workday Voice Agent.

This package contains error handling, async helpers and audio helpers shared
by the domain, service and presentation layers.
"""

from workday_agent.utils.error_handling import (
    ErrorSeverity,
    AppError,
    ApiError,
    AudioError,
    ConfigError,
    NotFoundError,
    StorageError,
    ValidationError,
    handle_exception,
)

from workday_agent.utils.async_helpers import (
    TaskManager,
    wait_for_event,
)

from workday_agent.utils.audio_utilities import (
    get_audio_duration,
    peak_level_dbfs,
    split_audio_chunks,
    validate_audio_format,
)

__all__ = [
    # Error handling
    "ErrorSeverity",
    "AppError",
    "ApiError",
    "AudioError",
    "ConfigError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "handle_exception",

    # Async utilities
    "TaskManager",
    "wait_for_event",

    # Audio utilities
    "get_audio_duration",
    "peak_level_dbfs",
    "split_audio_chunks",
    "validate_audio_format",
]
