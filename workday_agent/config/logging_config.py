"""
Logging configuration for the Workday Voice Agent.

Logs go to a rotating per-session file by default. Console logging is off by
default because stdout is where the conversation transcript is printed; when
enabled it writes to stderr.
"""

import logging
import logging.handlers
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from workday_agent.config import settings

# Libraries that are chatty at DEBUG level
_NOISY_LOGGERS = ("websockets", "aiohttp", "asyncio")


class LoggingManager:
    """
    Manages logging configuration for the application.

    Keeps track of the session identifier used to name log files and makes
    sure the root logger is configured exactly once.
    """

    _configured_loggers: Dict[str, bool] = {}
    _session_id: Optional[str] = None

    @classmethod
    def get_session_id(cls) -> str:
        """
        Get the current session ID, creating a new one if needed.

        Returns:
            str: The session identifier
        """
        if cls._session_id is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            cls._session_id = f"{timestamp}_{uuid.uuid4().hex[:8]}"
        return cls._session_id

    @classmethod
    def setup_logging(
        cls,
        level: Optional[str] = None,
        session_id: Optional[str] = None
    ) -> None:
        """
        Configure the root logger and set up handlers.

        Args:
            level: Optional override for the logging level
            session_id: Optional session ID to use
        """
        if session_id:
            cls._session_id = session_id

        log_level = level or settings.logging.level
        numeric_level = getattr(logging, log_level.upper(), logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

        if settings.logging.console_enabled:
            cls._add_console_handler(root_logger, numeric_level)

        if settings.logging.file_enabled:
            cls._create_file_handler(
                root_logger,
                settings.get_session_log_path(cls.get_session_id()),
                numeric_level
            )

        # Keep third-party debug output out of our logs unless explicitly asked for
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))

        cls._configured_loggers["root"] = True
        logging.getLogger(__name__).info(
            f"Logging configured: level={log_level}, session_id={cls.get_session_id()}"
        )

    @classmethod
    def get_logger(cls, name: str, level: Optional[str] = None) -> logging.Logger:
        """
        Get a logger with the specified name, configuring logging on first use.

        Args:
            name: The logger name
            level: Optional specific level for this logger

        Returns:
            logging.Logger: The configured logger
        """
        logger = logging.getLogger(name)

        if level:
            numeric_level = getattr(logging, level.upper(), None)
            if numeric_level:
                logger.setLevel(numeric_level)

        if not cls._configured_loggers:
            cls.setup_logging()

        return logger

    @classmethod
    def _add_console_handler(cls, logger: logging.Logger, level: int) -> None:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(settings.logging.format))
        logger.addHandler(console)

    @staticmethod
    def _create_file_handler(
        logger: logging.Logger,
        log_file: Union[str, Path],
        level: int
    ) -> None:
        """
        Create and add a rotating file handler to the logger.

        Args:
            logger: The logger to add the handler to
            log_file: The path to the log file
            level: The logging level for the handler
        """
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(settings.logging.detailed_format))
        logger.addHandler(file_handler)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a properly configured logger with the specified name.

    Args:
        name: The logger name (usually __name__)
        level: Optional specific level for this logger

    Returns:
        logging.Logger: The configured logger
    """
    return LoggingManager.get_logger(name, level)
