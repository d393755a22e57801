from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from moco_reports.api.deps import DateRange, get_moco_client
from moco_reports.schemas.reports import FlatRangeSummary
from moco_reports.services.flat_summary import build_presence_summary
from moco_reports.services.moco_client import MocoClient
from moco_reports.services.report_text import render_presences

router = APIRouter()


@router.get(
    "",
    response_model=FlatRangeSummary,
    summary="Presence hours per day with totals",
)
async def get_presences(
    period: DateRange = Depends(),
    client: MocoClient = Depends(get_moco_client),
) -> FlatRangeSummary:
    presences = await client.get_user_presences(period.start, period.end)
    return build_presence_summary(presences, period.start, period.end)


@router.get("/report", response_class=PlainTextResponse, summary="Presences as plain text")
async def get_presences_report(
    period: DateRange = Depends(),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    presences = await client.get_user_presences(period.start, period.end)
    return render_presences(build_presence_summary(presences, period.start, period.end))
