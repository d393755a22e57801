from calendar import isleap
from datetime import date

from moco_reports.core.config import settings


def validate_date_range(start: date, end: date) -> bool:
    return start <= end


def validate_year(year: int, today: date | None = None) -> bool:
    """Годы от MIN_REPORT_YEAR до следующего года включительно (планирование отпуска)."""
    current = (today or date.today()).year
    return settings.MIN_REPORT_YEAR <= year <= current + 1


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def days_in_year(year: int) -> int:
    return 366 if isleap(year) else 365
