from datetime import date

from pydantic import BaseModel, ConfigDict


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TimeValue(_Frozen):
    """Decimal hours together with their H:MM rendering."""

    hours: float
    hours_formatted: str


class CategoryNode(_Frozen):
    id: int | str
    name: str
    total: TimeValue
    children: tuple["CategoryNode", ...] = ()

    @property
    def children_by_id(self) -> dict[int | str, "CategoryNode"]:
        return {child.id: child for child in self.children}


class DailySummary(_Frozen):
    date: date
    categories: tuple[CategoryNode, ...]
    daily_total: TimeValue


class RangeSummary(_Frozen):
    start_date: date
    end_date: date
    daily_summaries: tuple[DailySummary, ...]
    category_totals: tuple[CategoryNode, ...]
    grand_total: TimeValue


class FlatDateSummary(_Frozen):
    date: date
    value: TimeValue
    days: float | None = None
    note: str | None = None


class FlatRangeSummary(_Frozen):
    start_date: date
    end_date: date
    entries: tuple[FlatDateSummary, ...]
    total: TimeValue
    working_days: int
    average_per_day: TimeValue


class HolidaySummary(_Frozen):
    year: int
    entries: tuple[FlatDateSummary, ...]
    total_taken_days: float
    annual_entitlement_days: float
    utilization_percentage: int
    remaining_days: float | None


class SickDaySummary(_Frozen):
    year: int
    entries: tuple[FlatDateSummary, ...]
    total_days: float


class PublicHolidayEntry(_Frozen):
    date: date
    name: str


class PublicHolidaySummary(_Frozen):
    year: int
    holidays: tuple[PublicHolidayEntry, ...]
    total: int
    approximate_working_days: int


class DatedValue(_Frozen):
    """Input of the single-dimension aggregators: hours on one date."""

    date: date
    value: float
    note: str | None = None
