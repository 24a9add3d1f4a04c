"""
Data models for workday documents.

A workday document is one JSON file per date holding the ordered list of
calendar events for that day. Documents are authored outside this
application and only ever read.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from workday_agent.domain.schedule.time_of_day import to_minutes


class CalendarEvent(BaseModel):
    """
    A scheduled event occupying the half-open interval ``[from, to)``.

    ``from`` is a Python keyword, so the bounds are exposed as ``start`` and
    ``end`` and serialized back under their JSON keys. ``start < end`` is
    assumed, not checked.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str
    title: str
    start: str = Field(alias="from")
    end: str = Field(alias="to")
    location: Optional[str] = None
    participants: Optional[List[str]] = None

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)

    def covers(self, minutes: int) -> bool:
        """True when ``minutes`` falls inside ``[from, to)``."""
        return self.start_minutes <= minutes < self.end_minutes

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with the document's own keys, omitting absent optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Workday(BaseModel):
    # A missing list means nothing is scheduled
    events: List[CalendarEvent] = Field(default_factory=list)


class WorkdayDocument(BaseModel):
    """Top-level shape of ``<date>.json``."""

    date: str
    workday: Workday
