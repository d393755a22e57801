import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from moco_reports.api.deps import DateRange, get_moco_client
from moco_reports.schemas.reports import RangeSummary
from moco_reports.services.moco_client import MocoClient
from moco_reports.services.range_summary import build_range_summary
from moco_reports.services.report_text import render_activities

logger = logging.getLogger(__name__)

router = APIRouter()


async def _activity_summary(
    client: MocoClient, period: DateRange, project_id: int | None
) -> RangeSummary:
    activities = await client.get_activities(period.start, period.end, project_id)
    logger.info(
        "Activities %s..%s (project=%s): %d records",
        period.start, period.end, project_id, len(activities),
    )
    records = [activity.to_timed_record() for activity in activities]
    return build_range_summary(records, period.start, period.end)


@router.get(
    "",
    response_model=RangeSummary,
    summary="Activities summed by date, project and task",
)
async def get_activities(
    period: DateRange = Depends(),
    project_id: int | None = Query(default=None, gt=0, description="Filter by project ID"),
    client: MocoClient = Depends(get_moco_client),
) -> RangeSummary:
    return await _activity_summary(client, period, project_id)


@router.get(
    "/report",
    response_class=PlainTextResponse,
    summary="Activities summary as plain text",
)
async def get_activities_report(
    period: DateRange = Depends(),
    project_id: int | None = Query(default=None, gt=0),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    summary = await _activity_summary(client, period, project_id)
    return render_activities(summary, project_id)
