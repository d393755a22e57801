from datetime import date
from typing import AsyncIterator

from fastapi import HTTPException, Query, status

from moco_reports.core.config import settings
from moco_reports.core.dates import validate_date_range, validate_year
from moco_reports.services.moco_client import MocoClient, build_http_client


async def get_moco_client() -> AsyncIterator[MocoClient]:
    """One MoCo HTTP session per request."""
    async with build_http_client() as http:
        yield MocoClient(http)


class DateRange:
    def __init__(
        self,
        start_date: date = Query(..., description="ISO date YYYY-MM-DD"),
        end_date: date = Query(..., description="ISO date YYYY-MM-DD"),
    ) -> None:
        if not validate_date_range(start_date, end_date):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Invalid date range: Start date must be before or equal to end date.",
            )
        self.start = start_date
        self.end = end_date


def report_year(
    year: int = Query(..., description="Year, e.g. 2024"),
) -> int:
    if not validate_year(year):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=(
                f'Invalid year: "{year}". Years between {settings.MIN_REPORT_YEAR} '
                f"and {date.today().year + 1} are allowed."
            ),
        )
    return year
