"""
Command-line interface for the Workday Voice Agent.

This module prints what happens during a conversation: push-to-talk
prompts, transcript lines from both sides and errors. It only listens on
the event bus and never changes application state.
"""

import os
import sys
import time

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.events.event_interface import (
    Event,
    EventBus,
    EventType,
    Subscriptions,
    event_bus,
)

logger = get_logger(__name__)

_KEY_LABELS = {"return": "ENTER"}


def key_label(name: str) -> str:
    """Display form of a key name, e.g. ``return`` -> ``ENTER``."""
    return _KEY_LABELS.get(name, name.upper())


class CliInterface:
    """
    Terminal output for the voice agent.

    Transcript lines are printed as ``<role>: <text>``; blank transcripts
    are skipped.
    """

    def __init__(
        self,
        bus: EventBus = event_bus,
        show_timestamps: bool = False,
        color_output: bool = True,
    ):
        """
        Initialize the CLI interface.

        Args:
            bus: Event bus to listen on
            show_timestamps: Whether to show timestamps for messages
            color_output: Whether to use colored output
        """
        self.bus = bus
        self.show_timestamps = show_timestamps
        self.color_output = color_output and self._supports_color()
        self.start_label = key_label(settings.capture.start_key)
        self.end_label = key_label(settings.capture.end_key)
        self._subscriptions = Subscriptions(bus)
        self._init_terminal_colors()

    def _init_terminal_colors(self) -> None:
        """Initialize terminal color codes based on terminal capabilities."""
        codes = {
            "RESET": "\033[0m",
            "BOLD": "\033[1m",
            "RED": "\033[31m",
            "GREEN": "\033[32m",
            "YELLOW": "\033[33m",
            "CYAN": "\033[36m",
            "GRAY": "\033[90m",
        }
        for name, code in codes.items():
            setattr(self, name, code if self.color_output else "")

    def start(self) -> None:
        """Subscribe to the events the interface displays."""
        self._subscriptions.subscribe(EventType.CAPTURE_STARTED, self._handle_capture_started)
        self._subscriptions.subscribe(EventType.CAPTURE_FLUSHED, self._handle_capture_flushed)
        self._subscriptions.subscribe(EventType.AGENT_WRITING, self._handle_writing)
        self._subscriptions.subscribe(EventType.AGENT_RESPONSE_DONE, self._handle_response_done)
        self._subscriptions.subscribe(EventType.CONNECTION_CLOSED, self._handle_connection_closed)
        self._subscriptions.subscribe(EventType.ERROR, self._handle_error)

    def stop(self) -> None:
        self._subscriptions.close()

    def _handle_capture_started(self, event: Event) -> None:
        self._print_safe(
            f"\n{self.BOLD}{self.RED}RECORDING...{self.RESET} (Press {self.end_label} when done)"
        )

    def _handle_capture_flushed(self, event: Event) -> None:
        self._print_safe(f"{self.YELLOW}Sending audio to Viki...{self.RESET}")

    def _handle_writing(self, event: Event) -> None:
        """
        Print a transcript line.

        Args:
            event: Transcript event with ``text`` and ``role``
        """
        text = event.data.get("text", "")
        if not text.strip():
            return

        role = event.data.get("role", "assistant")
        color = self.CYAN if role == "user" else self.GREEN
        self._print_safe(f"{self._format_timestamp()}{color}{role}{self.RESET}: {text}")

    def _handle_response_done(self, event: Event) -> None:
        self._print_safe(
            f"\nViki finished. Press {self.start_label} to talk, {self.end_label} to submit\n"
        )

    def _handle_connection_closed(self, event: Event) -> None:
        self._print_safe(f"{self.GRAY}Connection to the voice service closed{self.RESET}")

    def _handle_error(self, event: Event) -> None:
        error_data = event.data.get("error", {})
        error_message = error_data.get("message", "Unknown error")
        error_type = error_data.get("type") or error_data.get("code", "unknown")
        self._print_safe(
            f"{self._format_timestamp()}{self.BOLD}{self.RED}Error ({error_type}): {self.RESET}{error_message}"
        )

    def display_instructions(self, keyboard_enabled: bool = True) -> None:
        """Print the push-to-talk key bindings."""
        if not keyboard_enabled:
            self._print_safe(f"{self.GRAY}Keyboard control unavailable (input is not a terminal){self.RESET}")
            return
        self._print_safe(f"HOLD {self.start_label} to record")
        self._print_safe(f"PRESS {self.end_label} to send")

    def _format_timestamp(self) -> str:
        if not self.show_timestamps:
            return ""
        return f"{self.GRAY}[{time.strftime('%H:%M:%S')}] {self.RESET}"

    def _supports_color(self) -> bool:
        """
        Check if the terminal supports colored output.

        Returns:
            True if color is supported
        """
        # https://no-color.org/
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def _print_safe(self, *args, **kwargs) -> None:
        """
        Print to stdout with error handling.

        Args:
            *args: Arguments to pass to print
            **kwargs: Keyword arguments to pass to print
        """
        try:
            print(*args, **kwargs, flush=True)
        except (IOError, BrokenPipeError) as e:
            logger.debug(f"Failed to print to stdout: {e}")


def print_cli_header(version: str = "0.1.0") -> None:
    """
    Print application header with version information.

    Args:
        version: Application version
    """
    header = f"""
╭──────────────────────────────────────────────╮
│ Workday Voice Agent                           │
│ Version: {version.ljust(36)}│
│ Push-to-talk conversation with Viki           │
╰──────────────────────────────────────────────╯
"""
    print(header)
