"""
Application settings and configuration.

This module provides a centralized configuration management system using Pydantic.
It loads settings from environment variables, .env files, or falls back to defaults.
"""

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

# Base directories
ROOT_DIR = Path(__file__).parent.parent.parent
PACKAGE_DIR = ROOT_DIR / "workday_agent"


def _env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes", "y")


class ApiSettings(BaseModel):
    """OpenAI Realtime API configuration settings."""

    api_key: str = Field(
        default_factory=lambda: _env("OPENAI_API_KEY", ""),
        description="OpenAI API key for authentication",
        repr=False
    )

    model: str = Field(
        default_factory=lambda: _env("OPENAI_REALTIME_MODEL", "gpt-4o-realtime-preview-2024-10-01"),
        description="OpenAI realtime model identifier"
    )

    base_url: str = Field(
        default_factory=lambda: _env("OPENAI_REALTIME_URL", "wss://api.openai.com/v1/realtime"),
        description="OpenAI Realtime websocket endpoint"
    )

    voice: str = Field(
        default_factory=lambda: _env("VOICE", "sage"),
        description="Voice to use for audio responses"
    )

    transcription_model: str = Field(
        default="whisper-1",
        description="Model used to transcribe the user's recordings"
    )

    connect_timeout: float = Field(
        default_factory=lambda: float(_env("OPENAI_CONNECT_TIMEOUT", "10.0")),
        description="Seconds to wait for session.created after connecting"
    )

    @field_validator("api_key")
    @classmethod
    def api_key_must_not_be_empty(cls, v):
        """Warn when the API key is missing."""
        if not v:
            print("WARNING: OpenAI API key is not set. Please set OPENAI_API_KEY environment variable.")
        return v

    @field_validator("voice")
    @classmethod
    def voice_must_be_valid(cls, v):
        """Validate that voice is a valid option."""
        valid_voices = ["alloy", "ash", "ballad", "coral", "echo", "sage", "shimmer", "verse"]
        if v not in valid_voices:
            print(f"WARNING: Invalid voice '{v}'. Using default 'sage'.")
            return "sage"
        return v


class AudioSettings(BaseModel):
    """Audio configuration settings."""

    sample_rate: int = Field(
        default_factory=lambda: int(_env("AUDIO_SAMPLE_RATE", "24000")),
        description="Audio sample rate in Hz (required by OpenAI)"
    )

    channels: int = Field(
        default_factory=lambda: int(_env("AUDIO_CHANNELS", "1")),
        description="Number of audio channels (1 for mono)"
    )

    sample_width: int = Field(
        default=2,  # 16-bit audio = 2 bytes
        description="Sample width in bytes"
    )

    frames_per_buffer: int = Field(
        default_factory=lambda: int(_env("AUDIO_CHUNK_SIZE", "1024")),
        description="Frames per microphone chunk"
    )

    input_device: Optional[int] = Field(
        default=None,
        description="Index of audio input device (None for system default)"
    )

    output_device: Optional[int] = Field(
        default=None,
        description="Index of audio output device (None for system default)"
    )

    @field_validator("sample_rate")
    @classmethod
    def validate_sample_rate(cls, v):
        """Validate that sample rate is valid for OpenAI."""
        if v != 24000:
            print(f"WARNING: Sample rate {v}Hz may not be compatible with OpenAI Realtime API (requires 24000Hz).")
        return v

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, v):
        """Validate that channels is valid for OpenAI."""
        if v != 1:
            print(f"WARNING: Channel count {v} may not be compatible with OpenAI Realtime API (requires mono).")
        return v


class CaptureSettings(BaseModel):
    """Push-to-talk key bindings."""

    start_key: str = Field(
        default_factory=lambda: _env("CAPTURE_START_KEY", "space"),
        description="Key that starts (or restarts) a recording"
    )

    end_key: str = Field(
        default_factory=lambda: _env("CAPTURE_END_KEY", "return"),
        description="Key that sends the current recording"
    )

    cancel_key: str = Field(
        default="c",
        description="Key that, together with Ctrl, terminates the process"
    )

    @field_validator("start_key", "end_key")
    @classmethod
    def keys_are_lowercase(cls, v):
        return v.strip().lower()


class RegistrySettings(BaseModel):
    """Llama Stack model registration settings."""

    base_url: str = Field(
        default_factory=lambda: _env("LLAMA_STACK_BASE_URL", "http://localhost:8321"),
        description="Base URL of the Llama Stack server"
    )

    model_id: str = Field(
        default_factory=lambda: _env("LLAMA_STACK_MODEL_ID", "model_id"),
        description="Model identifier to register"
    )

    timeout: float = Field(
        default_factory=lambda: float(_env("LLAMA_STACK_TIMEOUT", "30.0")),
        description="HTTP timeout in seconds"
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = Field(
        default_factory=lambda: _env("LOG_LEVEL", "INFO"),
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    console_enabled: bool = Field(
        default_factory=lambda: _env_bool("LOG_CONSOLE_ENABLED", "false"),
        description="Whether to log to console"
    )

    file_enabled: bool = Field(
        default_factory=lambda: _env_bool("LOG_FILE_ENABLED", "true"),
        description="Whether to log to file"
    )

    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    detailed_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        description="Detailed log format string for file logging"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate that log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            print(f"WARNING: Invalid log level '{v}'. Using INFO.")
            return "INFO"
        return v.upper()


class Settings(BaseModel):
    """Main application settings."""

    # Application info
    app_name: str = Field(
        default="Workday Voice Agent",
        description="Application name"
    )

    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )

    # Sub-configurations
    api: ApiSettings = Field(default_factory=ApiSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Paths
    root_dir: Path = ROOT_DIR
    logs_dir: Path = Field(
        default_factory=lambda: Path(_env("LOG_DIR", str(ROOT_DIR / "logs")))
    )
    # Workday documents are looked up relative to the working directory
    data_dir: Path = Field(
        default_factory=lambda: Path(_env("EVENTS_DATA_DIR", str(Path.cwd() / "data")))
    )

    # Runtime configs
    debug_mode: bool = Field(
        default_factory=lambda: _env_bool("DEBUG_MODE", "false"),
        description="Enable debug mode"
    )

    def __init__(self, **data: Any):
        """Initialize settings and create any required directories."""
        super().__init__(**data)
        self._create_required_directories()

    def _create_required_directories(self) -> None:
        """Create the log directories; the data directory is never written."""
        if self.logging.file_enabled:
            session_log_dir = self.logs_dir / "sessions"
            session_log_dir.mkdir(parents=True, exist_ok=True)

    def get_session_log_path(self, session_id: str) -> Path:
        """Get path for session-specific log file."""
        return self.logs_dir / "sessions" / f"{session_id}.log"
