"""Wall-clock times encoded as ``H:MM`` / ``HH:MM`` (24-hour)."""

import re

# 0:00 through 23:59, optional leading zero on the hour, two-digit minutes
TIME_PATTERN = re.compile(r"([0-1]?[0-9]|2[0-3]):[0-5][0-9]")


def is_valid_time(value: str) -> bool:
    """Return True if ``value`` is a valid 24-hour ``H:MM`` or ``HH:MM`` time."""
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


def to_minutes(value: str) -> int:
    """
    Convert ``HH:MM`` to minutes since midnight.

    Raises:
        ValueError: If the value is not two ``:``-separated integers
    """
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)
