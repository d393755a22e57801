"""
Hour arithmetic and the H:MM rendering used by every report.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from moco_reports.core.config import settings
from moco_reports.core.errors import InvalidInput
from moco_reports.schemas.reports import TimeValue

_MINUTES_PER_DAY = 24 * 60


def _round_half_up(value: float, places: int = 0) -> float:
    # str() даёт кратчайшее десятичное представление: 1.235 -> "1.235", а не 1.2349999...
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def to_clock_string(hours: float) -> str:
    """
    Render decimal hours as "H:MM" (hours not zero-padded).

    Minutes are rounded half-up; a rounding result of 60 carries into the
    hour, so 1.9999 renders as "2:00".
    """
    if hours < 0:
        raise InvalidInput(f"Hours cannot be negative: {hours}")

    whole_hours = math.floor(hours)
    minutes = math.floor((hours - whole_hours) * 60 + 0.5)
    if minutes == 60:
        whole_hours += 1
        minutes = 0
    return f"{whole_hours}:{minutes:02d}"


def round_hours(hours: float) -> float:
    return _round_half_up(hours, 2)


def round_percentage(value: float) -> int:
    return int(_round_half_up(value))


def sum_hours(values: Iterable[float]) -> float:
    total = 0.0
    for value in values:
        total += value
    return total


def hours_to_days(hours: float) -> float:
    return hours / settings.HOURS_PER_WORKDAY


def days_to_hours(days: float) -> float:
    return days * settings.HOURS_PER_WORKDAY


def time_value(hours: float) -> TimeValue:
    """Pair rounded decimal hours with the clock rendering of the exact value."""
    return TimeValue(hours=round_hours(hours), hours_formatted=to_clock_string(hours))


def _clock_minutes(clock: str) -> int:
    try:
        h_str, m_str = clock.split(":")
        h, m = int(h_str), int(m_str)
    except ValueError:
        raise InvalidInput(f"Invalid clock time '{clock}', expected HH:MM")
    if not (0 <= h < 24 and 0 <= m < 60):
        raise InvalidInput(f"Invalid clock time '{clock}', expected HH:MM")
    return h * 60 + m


def hours_between(from_time: str, to_time: str) -> float:
    """
    Elapsed hours between two "HH:MM" clock times of one presence span.

    An end time before the start time is taken to be on the next day.
    """
    diff = _clock_minutes(to_time) - _clock_minutes(from_time)
    if diff < 0:
        diff += _MINUTES_PER_DAY
    return diff / 60
