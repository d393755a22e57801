"""
Vacation, sick-day and public-holiday routes.

All three read /schedules of the requested year; the client has already
classified each entry into an AbsenceKind.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from moco_reports.api.deps import get_moco_client, report_year
from moco_reports.schemas.moco import AbsenceKind
from moco_reports.schemas.reports import HolidaySummary, PublicHolidaySummary, SickDaySummary
from moco_reports.services.flat_summary import (
    build_holiday_summary,
    build_public_holiday_summary,
    build_sick_day_summary,
)
from moco_reports.services.moco_client import MocoClient
from moco_reports.services.report_text import (
    render_holidays,
    render_public_holidays,
    render_sick_days,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _holiday_summary(client: MocoClient, year: int) -> HolidaySummary:
    entitlements = await client.get_holiday_entitlements(year)
    taken = await client.get_absences(year, AbsenceKind.VACATION)
    logger.info(
        "Holidays %d: entitlements=%d, taken entries=%d", year, len(entitlements), len(taken)
    )
    return build_holiday_summary(taken, entitlements, year)


async def _sick_day_summary(client: MocoClient, year: int) -> SickDaySummary:
    return build_sick_day_summary(await client.get_absences(year, AbsenceKind.SICK_DAY), year)


async def _public_holiday_summary(client: MocoClient, year: int) -> PublicHolidaySummary:
    return build_public_holiday_summary(
        await client.get_absences(year, AbsenceKind.PUBLIC_HOLIDAY), year
    )


@router.get(
    "/holidays",
    response_model=HolidaySummary,
    summary="Taken vacation days with entitlement utilization",
)
async def get_holidays(
    year: int = Depends(report_year),
    client: MocoClient = Depends(get_moco_client),
) -> HolidaySummary:
    return await _holiday_summary(client, year)


@router.get("/holidays/report", response_class=PlainTextResponse, summary="Vacation overview as plain text")
async def get_holidays_report(
    year: int = Depends(report_year),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    return render_holidays(await _holiday_summary(client, year))


@router.get(
    "/sick-days",
    response_model=SickDaySummary,
    summary="Sick days of a year",
)
async def get_sick_days(
    year: int = Depends(report_year),
    client: MocoClient = Depends(get_moco_client),
) -> SickDaySummary:
    return await _sick_day_summary(client, year)


@router.get("/sick-days/report", response_class=PlainTextResponse, summary="Sick days as plain text")
async def get_sick_days_report(
    year: int = Depends(report_year),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    return render_sick_days(await _sick_day_summary(client, year))


@router.get(
    "/public-holidays",
    response_model=PublicHolidaySummary,
    summary="Public holidays of a year",
)
async def get_public_holidays(
    year: int = Depends(report_year),
    client: MocoClient = Depends(get_moco_client),
) -> PublicHolidaySummary:
    return await _public_holiday_summary(client, year)


@router.get(
    "/public-holidays/report",
    response_class=PlainTextResponse,
    summary="Public holidays as plain text",
)
async def get_public_holidays_report(
    year: int = Depends(report_year),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    return render_public_holidays(await _public_holiday_summary(client, year))
