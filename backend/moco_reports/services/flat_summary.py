"""
Single-dimension aggregators: one value per date plus range statistics.

Used for presences (hours per day), vacation and sick days (hours and
day counts per date) and public holidays (a plain dated list).
"""

import logging
import math
from datetime import date
from typing import Iterable, Sequence

from moco_reports.core.dates import days_in_year
from moco_reports.core.errors import InvalidInput
from moco_reports.schemas.moco import Absence, HolidayEntitlement, Presence
from moco_reports.schemas.reports import (
    DatedValue,
    FlatDateSummary,
    FlatRangeSummary,
    HolidaySummary,
    PublicHolidayEntry,
    PublicHolidaySummary,
    SickDaySummary,
)
from moco_reports.services.time_format import (
    days_to_hours,
    hours_between,
    hours_to_days,
    round_hours,
    round_percentage,
    sum_hours,
    time_value,
)

logger = logging.getLogger(__name__)


def _group_by_date(values: Iterable[DatedValue]) -> list[tuple[date, float, str | None]]:
    hours_by_date: dict[date, float] = {}
    notes_by_date: dict[date, list[str]] = {}
    for item in values:
        if item.value < 0:
            raise InvalidInput(f"Negative value on {item.date.isoformat()}: {item.value}")
        hours_by_date[item.date] = hours_by_date.get(item.date, 0.0) + item.value
        if item.note:
            notes_by_date.setdefault(item.date, []).append(item.note)

    return [
        (day, hours_by_date[day], "; ".join(notes_by_date[day]) if day in notes_by_date else None)
        for day in sorted(hours_by_date)
    ]


def aggregate_by_date(
    values: Iterable[DatedValue],
    start_date: date,
    end_date: date,
) -> FlatRangeSummary:
    """
    Sum values per date (dates ascending) with total, working-day count
    and average per working day. No dates means a zero average.
    """
    grouped = _group_by_date(values)
    entries = tuple(
        FlatDateSummary(date=day, value=time_value(hours), note=note)
        for day, hours, note in grouped
    )
    total = sum_hours(hours for _, hours, _ in grouped)
    working_days = len(entries)
    average = round_hours(total / working_days) if working_days > 0 else 0.0

    return FlatRangeSummary(
        start_date=start_date,
        end_date=end_date,
        entries=entries,
        total=time_value(total),
        working_days=working_days,
        average_per_day=time_value(average),
    )


def presence_values(presences: Iterable[Presence]) -> list[DatedValue]:
    """Closed presence spans as hours; open entries (no end time) are left out."""
    values: list[DatedValue] = []
    skipped_open = 0
    for presence in presences:
        if not presence.is_closed:
            skipped_open += 1
            continue
        values.append(
            DatedValue(
                date=presence.date,
                value=hours_between(presence.from_time, presence.to_time),
            )
        )
    if skipped_open:
        logger.debug("Presences: %d open entries excluded from totals", skipped_open)
    return values


def build_presence_summary(
    presences: Sequence[Presence],
    start_date: date,
    end_date: date,
) -> FlatRangeSummary:
    summary = aggregate_by_date(presence_values(presences), start_date, end_date)
    logger.info(
        "Presence summary %s..%s: records=%d, days=%d, total=%.2fh",
        start_date, end_date, len(presences), summary.working_days, summary.total.hours,
    )
    return summary


def absence_hours(absence: Absence) -> float:
    """
    Hours covered by one absence entry.

    Each of the am/pm half-day flags counts half a workday. The flags are
    used only when both are reported; otherwise the entry is a full day.
    """
    if absence.am is None or absence.pm is None:
        return days_to_hours(1)
    halves = int(bool(absence.am)) + int(bool(absence.pm))
    return days_to_hours(halves * 0.5)


def _absence_entries(absences: Iterable[Absence]) -> tuple[FlatDateSummary, ...]:
    grouped = _group_by_date(
        DatedValue(date=a.date, value=absence_hours(a), note=a.comment or None)
        for a in absences
    )
    return tuple(
        FlatDateSummary(
            date=day,
            value=time_value(hours),
            days=round_hours(hours_to_days(hours)),
            note=note,
        )
        for day, hours, note in grouped
    )


def entitlement_days(entitlements: Sequence[HolidayEntitlement]) -> float:
    """Entitlement of the year from the first entry MoCo returns; 0 when there is none."""
    if not entitlements:
        return 0.0
    first = entitlements[0]
    if first.days is not None:
        return first.days
    if first.hours is not None:
        return hours_to_days(first.hours)
    return 0.0


def build_holiday_summary(
    absences: Sequence[Absence],
    entitlements: Sequence[HolidayEntitlement],
    year: int,
) -> HolidaySummary:
    entries = _absence_entries(absences)
    taken = sum_hours(entry.days for entry in entries)
    entitled = entitlement_days(entitlements)

    if entitled > 0:
        utilization = round_percentage(taken / entitled * 100)
        remaining: float | None = round_hours(max(0.0, entitled - taken))
    else:
        utilization = 0
        remaining = None

    logger.info(
        "Holiday summary %d: taken=%.2f, entitlement=%.2f, utilization=%d%%",
        year, taken, entitled, utilization,
    )
    return HolidaySummary(
        year=year,
        entries=entries,
        total_taken_days=round_hours(taken),
        annual_entitlement_days=entitled,
        utilization_percentage=utilization,
        remaining_days=remaining,
    )


def build_sick_day_summary(absences: Sequence[Absence], year: int) -> SickDaySummary:
    entries = _absence_entries(absences)
    total = sum_hours(entry.days for entry in entries)
    return SickDaySummary(year=year, entries=entries, total_days=round_hours(total))


def build_public_holiday_summary(absences: Sequence[Absence], year: int) -> PublicHolidaySummary:
    holidays = tuple(
        PublicHolidayEntry(date=a.date, name=a.name or "Public Holiday")
        for a in sorted(absences, key=lambda a: a.date)
    )
    # Грубая оценка: выходные считаются как 2 дня на каждую полную неделю
    total_days = days_in_year(year)
    approximate_weekends = math.floor(total_days / 7) * 2
    return PublicHolidaySummary(
        year=year,
        holidays=holidays,
        total=len(holidays),
        approximate_working_days=total_days - approximate_weekends - len(holidays),
    )
