"""
Async utility functions for the Workday Voice Agent.

This module provides helpers for working with asyncio: tracking
fire-and-forget tasks so their failures are logged and they can be
cancelled on shutdown, and bounded waits on events.
"""

import asyncio
from typing import Coroutine, List, Optional, Set

from workday_agent.config.logging_config import get_logger

logger = get_logger(__name__)


class TaskManager:
    """
    Manager for tracking and cleaning up async tasks.

    Tasks created through the manager are not awaited by their creator.
    Exceptions they raise are logged when they finish instead of being lost.
    """

    def __init__(self, name: str = "default"):
        """
        Initialize the task manager.

        Args:
            name: Name for this task manager (for logging)
        """
        self.name = name
        self.tasks: Set[asyncio.Task] = set()
        logger.debug(f"TaskManager '{name}' initialized")

    def create_task(self, coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        """
        Create and track a new asyncio task.

        Args:
            coro: Coroutine to run as a task
            name: Optional name for the task

        Returns:
            asyncio.Task: The created task
        """
        task = asyncio.create_task(coro, name=name)
        task.add_done_callback(self._task_done_callback)
        self.tasks.add(task)
        logger.debug(f"Task {task.get_name()} created in '{self.name}'")
        return task

    @property
    def pending(self) -> List[str]:
        """Names of the tasks that have not finished yet."""
        return [task.get_name() for task in self.tasks if not task.done()]

    def _task_done_callback(self, task: asyncio.Task) -> None:
        self.tasks.discard(task)

        if task.cancelled():
            return

        exception = task.exception()
        if exception:
            logger.error(
                f"Task {task.get_name()} raised an exception: {exception}",
                exc_info=exception
            )

    async def cancel_all(self, wait: bool = True, timeout: Optional[float] = 5.0) -> None:
        """
        Cancel all tracked tasks.

        Args:
            wait: Whether to wait for tasks to complete
            timeout: Timeout in seconds if waiting, or None for no timeout
        """
        if not self.tasks:
            return

        for task in list(self.tasks):
            if not task.done():
                logger.debug(f"Cancelling task {task.get_name()}")
                task.cancel()

        if wait and self.tasks:
            _, pending = await asyncio.wait(
                set(self.tasks),
                timeout=timeout,
                return_when=asyncio.ALL_COMPLETED
            )
            if pending:
                pending_names = [t.get_name() for t in pending]
                logger.warning(f"Some tasks didn't complete within timeout: {pending_names}")


async def wait_for_event(event: asyncio.Event, timeout: Optional[float] = None) -> bool:
    """
    Wait for an event with timeout.

    Args:
        event: Event to wait for
        timeout: Timeout in seconds or None for no timeout

    Returns:
        bool: True if event was set, False if timeout occurred
    """
    if timeout is None:
        await event.wait()
        return True

    try:
        await asyncio.wait_for(event.wait(), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        return False
