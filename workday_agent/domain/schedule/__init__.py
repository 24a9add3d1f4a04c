"""Workday schedule lookups: document models, time helpers and the query service."""

from workday_agent.domain.schedule.models import CalendarEvent, Workday, WorkdayDocument
from workday_agent.domain.schedule.results import FailureReason, NotFound, Ok, QueryResult
from workday_agent.domain.schedule.service import EventQueryService
from workday_agent.domain.schedule.time_of_day import TIME_PATTERN, is_valid_time, to_minutes

__all__ = [
    "CalendarEvent",
    "EventQueryService",
    "FailureReason",
    "NotFound",
    "Ok",
    "QueryResult",
    "TIME_PATTERN",
    "Workday",
    "WorkdayDocument",
    "is_valid_time",
    "to_minutes",
]
