"""
Event query service.

Answers two questions about a workday document: which events are scheduled
on a date, and which event is happening at a given time on that date (or
which one comes next). Documents are read from ``<data_dir>/<date>.json`` on
every call; nothing is cached, so concurrent queries share no state.
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

from workday_agent.config import settings
from workday_agent.config.logging_config import get_logger
from workday_agent.domain.schedule.models import CalendarEvent, WorkdayDocument
from workday_agent.domain.schedule.results import NotFound, Ok, QueryResult
from workday_agent.domain.schedule.time_of_day import is_valid_time, to_minutes
from workday_agent.utils.error_handling import (
    NotFoundError,
    StorageError,
    ValidationError,
    handle_exception,
)

logger = get_logger(__name__)

INVALID_TIME_MESSAGE = "Invalid time format. Please use HH:MM format (e.g., '09:15' or '14:30')"


class EventQueryService:
    """
    Read-only queries over per-date workday documents.

    Both query methods return a tagged result and never raise: missing data,
    malformed input and unreadable files all come back as ``NotFound``.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the service.

        Args:
            data_dir: Directory holding ``<date>.json`` files
                (defaults to ``settings.data_dir``)
        """
        self.data_dir = Path(data_dir) if data_dir is not None else settings.data_dir

    async def list_events(self, date: str) -> QueryResult[List[CalendarEvent]]:
        """
        All events scheduled on ``date``, in file order.

        A document with no events is reported the same way as a missing one.
        """
        try:
            document = await self._load_document(date)
            if document is None:
                raise NotFoundError(
                    f"No events found for date {date}. Please check if the date is correct."
                )

            events = document.workday.events
            if not events:
                raise NotFoundError(f"No events scheduled for {date}")

            logger.debug(f"Found {len(events)} events for {date}")
            return Ok(list(events))

        except NotFoundError as e:
            return NotFound.from_error(e)
        except Exception as e:
            return self._storage_failure(e, date)

    async def find_event_at(self, time: str, date: str) -> QueryResult[CalendarEvent]:
        """
        The event happening at ``time`` on ``date``.

        The first event in file order whose ``[from, to)`` interval contains
        the time wins, so overlapping entries resolve to the earlier-listed
        one. When nothing covers the time the result names the next event
        that starts after it, if there is one.
        """
        if not is_valid_time(time):
            return NotFound.from_error(ValidationError(INVALID_TIME_MESSAGE))

        try:
            document = await self._load_document(date)
            if document is None:
                raise NotFoundError(f"No event data found for {date}")

            events = document.workday.events
            minutes = to_minutes(time)

            for event in events:
                if event.covers(minutes):
                    return Ok(event)

            # sorted() copies; the document order stays untouched
            by_start = sorted(events, key=lambda evt: evt.start_minutes)
            upcoming = next((evt for evt in by_start if evt.start_minutes > minutes), None)

            if upcoming is not None:
                raise NotFoundError(
                    f'No event at {time} on {date}. Next event is "{upcoming.title}" at {upcoming.start}',
                    details={"next_event": upcoming}
                )

            raise NotFoundError(f"No event found at {time} on {date}. No upcoming events for the day.")

        except NotFoundError as e:
            return NotFound.from_error(e)
        except Exception as e:
            return self._storage_failure(e, date)

    def document_path(self, date: str) -> Optional[Path]:
        """
        Path of the document for ``date``, or None if it would fall outside
        the data directory.
        """
        path = self.data_dir / f"{date}.json"
        if path.parent.resolve() != self.data_dir.resolve():
            return None
        return path

    async def _load_document(self, date: str) -> Optional[WorkdayDocument]:
        """Load and validate the document for ``date``; None if there is none."""
        path = self.document_path(date)
        if path is None:
            logger.warning(f"Rejected date outside the data directory: {date!r}")
            return None
        return await asyncio.to_thread(self._read_document, path)

    @staticmethod
    def _read_document(path: Path) -> Optional[WorkdayDocument]:
        if not path.exists():
            return None
        content = path.read_text(encoding="utf-8")
        return WorkdayDocument.model_validate(json.loads(content))

    def _storage_failure(self, exception: Exception, date: str) -> NotFound:
        error = handle_exception(
            exception,
            context={"date": date, "data_dir": str(self.data_dir)},
            error_class=StorageError,
            log_exception=False
        )
        logger.warning(f"Failed to read events for {date}: {error}")
        return NotFound.from_error(error)
