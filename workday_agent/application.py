"""
Main application for the Workday Voice Agent.

This module brings together all components: the realtime client, the audio
streams, the push-to-talk capture controller and the terminal interface,
plus the command-line entry point with its offline lookup commands.
"""

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from workday_agent import __version__
from workday_agent.config import settings
from workday_agent.config.logging_config import LoggingManager, get_logger
from workday_agent.domain.capture import CaptureController
from workday_agent.domain.schedule import EventQueryService
from workday_agent.events.event_interface import (
    Event,
    EventBus,
    EventType,
    Subscriptions,
    event_bus,
)
from workday_agent.presentation.cli import CliInterface, print_cli_header
from workday_agent.presentation.keyboard import KeyboardReader
from workday_agent.services.api_client import RealtimeClient
from workday_agent.services.audio_service import AudioService
from workday_agent.services.model_registry import ModelRegistryClient
from workday_agent.services.realtime_event_handler import RealtimeEventHandler
from workday_agent.services.tool_dispatcher import ToolDispatcher
from workday_agent.system_instructions import get_session_profile
from workday_agent.utils.error_handling import AppError, AudioError, ConfigError, ErrorSeverity

logger = get_logger(__name__)


class Application:
    """
    Main application class for the Workday Voice Agent.

    Owns every long-lived component, starts them in dependency order and
    stops them in reverse when a shutdown is requested.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        bus: EventBus = event_bus,
        input_device: Optional[int] = None,
        output_device: Optional[int] = None,
    ):
        """
        Initialize the application.

        Args:
            data_dir: Directory with the workday documents (defaults to settings)
            bus: Event bus shared by all components
            input_device: Microphone device index (None for the configured default)
            output_device: Speaker device index (None for the configured default)
        """
        self.bus = bus

        self.query_service = EventQueryService(data_dir)
        self.tool_dispatcher = ToolDispatcher(self.query_service)
        self.api_client = RealtimeClient(
            RealtimeEventHandler(tool_dispatcher=self.tool_dispatcher, bus=bus),
            bus=bus
        )
        self.audio_service = AudioService(
            bus=bus,
            input_device_index=input_device,
            output_device_index=output_device
        )
        self.capture = CaptureController(self.api_client.send_audio, bus=bus)
        self.cli = CliInterface(bus=bus)
        self.keyboard = KeyboardReader(bus=bus)

        self.shutdown_event = asyncio.Event()
        self._subscriptions = Subscriptions(bus)

        logger.info("Application initialized")

    async def start(self) -> bool:
        """
        Start the application.

        Returns:
            bool: True if the application started successfully
        """
        logger.info("Starting application")
        if not settings.api.api_key:
            ConfigError(
                "OPENAI_API_KEY is not set; add it to the environment or a .env file",
                severity=ErrorSeverity.CRITICAL
            ).log()
            return False

        self._subscriptions.subscribe(EventType.SHUTDOWN, self._handle_shutdown_event)
        self._register_signal_handlers()

        profile = get_session_profile()
        if not await self.api_client.connect(profile["instructions"], profile["tools"]):
            logger.error("Failed to connect to OpenAI Realtime API")
            return False

        try:
            await self.audio_service.start()
        except AudioError as e:
            e.log()
            return False

        self.capture.start()
        self.cli.start()
        keyboard_enabled = self.keyboard.start()
        self.cli.display_instructions(keyboard_enabled)

        logger.info("Application started successfully")
        return True

    async def stop(self) -> None:
        """Stop the application and clean up resources."""
        logger.info("Stopping application")

        self.keyboard.stop()
        self.cli.stop()
        try:
            await self.capture.stop()
            await self.audio_service.stop()
            await self.api_client.disconnect()
        except Exception as e:
            error = AppError(
                f"Error during application shutdown: {e}",
                severity=ErrorSeverity.ERROR,
                cause=e
            )
            error.log()
        finally:
            self._subscriptions.close()

        logger.info("Application stopped")

    async def run(self) -> int:
        """
        Run the application until shutdown is requested.

        Returns:
            int: Process exit code
        """
        print_cli_header(__version__)

        try:
            if not await self.start():
                logger.error("Application failed to start")
                print("Failed to start. See the session log for details.", file=sys.stderr)
                return 1

            await self.shutdown_event.wait()
            return 0
        finally:
            await self.stop()

    def shutdown(self) -> None:
        """Request application shutdown."""
        logger.info("Shutdown requested")
        self.shutdown_event.set()

    def _handle_shutdown_event(self, event: Event) -> None:
        logger.info(f"Processing shutdown event. Reason: {event.data.get('reason', 'unknown')}")
        self.shutdown()

    def _register_signal_handlers(self) -> None:
        """Register OS signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.shutdown)
            except (NotImplementedError, RuntimeError):
                # Not supported on Windows or outside the main thread
                logger.debug(f"Could not register handler for signal {sig}")


async def run_lookup(dispatcher: ToolDispatcher, tool: str, arguments: dict) -> int:
    """
    Run one lookup tool and print its JSON payload.

    Returns:
        int: 0 when the lookup found something, 1 otherwise
    """
    payload = await dispatcher.dispatch(tool, arguments)
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    found = isinstance(payload, list) or (
        isinstance(payload, dict) and payload.get("success", True) and payload.get("found", True)
    )
    return 0 if found else 1


def list_devices() -> int:
    """Print the audio devices PyAudio can open."""
    audio_service = AudioService()
    try:
        devices = audio_service.list_audio_devices()
    except AudioError as e:
        e.log()
        print(f"Could not list audio devices: {e.message}", file=sys.stderr)
        return 1
    finally:
        if audio_service.py_audio:
            audio_service.py_audio.terminate()

    print("\nAvailable Audio Devices:")
    print("------------------------")
    for device in devices:
        if device.get("maxInputChannels", 0) > 0:
            print(f"Input  {device['index']}: {device['name']}")
        if device.get("maxOutputChannels", 0) > 0:
            print(f"Output {device['index']}: {device['name']}")
    return 0


async def register_model(model_id: Optional[str]) -> int:
    """Register a model with the Llama Stack server."""
    model = await ModelRegistryClient().register_model(model_id)
    if model is None:
        print("Model registration failed. See the session log for details.", file=sys.stderr)
        return 1
    print(json.dumps(model, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Command-line arguments for the agent and its offline commands."""
    parser = argparse.ArgumentParser(
        prog="workday-agent",
        description="Push-to-talk voice agent with workday lookups"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (defaults to LOG_LEVEL)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding <date>.json workday documents"
    )
    parser.add_argument(
        "--input-device",
        type=int,
        metavar="INDEX",
        help="Microphone device index (see --list-devices)"
    )
    parser.add_argument(
        "--output-device",
        type=int,
        metavar="INDEX",
        help="Speaker device index (see --list-devices)"
    )

    commands = parser.add_mutually_exclusive_group()
    commands.add_argument(
        "--list-devices",
        action="store_true",
        help="Print the available audio devices and exit"
    )
    commands.add_argument(
        "--register-model",
        nargs="?",
        const="",
        metavar="MODEL_ID",
        help="Register a model with the Llama Stack server and exit"
    )
    commands.add_argument(
        "--list-events",
        metavar="DATE",
        help="Print the events scheduled on DATE (YYYY-MM-DD) and exit"
    )
    commands.add_argument(
        "--find-event",
        metavar="TIME",
        help="Print the event happening at TIME (HH:MM) on --date and exit"
    )
    parser.add_argument(
        "--date",
        help="Date for --find-event (YYYY-MM-DD)"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for running the application from the command line."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.find_event and not args.date:
        parser.error("--find-event requires --date")

    if args.debug:
        settings.debug_mode = True
    LoggingManager.setup_logging("DEBUG" if args.debug else args.log_level)

    try:
        if args.list_devices:
            return list_devices()

        if args.register_model is not None:
            return asyncio.run(register_model(args.register_model or None))

        if args.list_events or args.find_event:
            dispatcher = ToolDispatcher(EventQueryService(args.data_dir))
            if args.list_events:
                return asyncio.run(run_lookup(dispatcher, "get_events", {"date": args.list_events}))
            return asyncio.run(
                run_lookup(dispatcher, "get_event", {"time": args.find_event, "date": args.date})
            )

        return asyncio.run(Application(
            data_dir=args.data_dir,
            input_device=args.input_device,
            output_device=args.output_device
        ).run())

    except KeyboardInterrupt:
        print("\nApplication terminated by user")
        return 0
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        print(f"\nApplication error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
