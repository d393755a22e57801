import logging
from datetime import date
from typing import Iterable

from moco_reports.schemas.moco import TimedRecord
from moco_reports.schemas.reports import DailySummary, RangeSummary
from moco_reports.services.grouping import CategoryForest, group_by_path, sort_by_date
from moco_reports.services.time_format import sum_hours, time_value

logger = logging.getLogger(__name__)


def build_range_summary(
    records: Iterable[TimedRecord],
    start_date: date,
    end_date: date,
) -> RangeSummary:
    """
    Build the multi-day report: per-day trees, cross-day category totals
    and the grand total.

    Every total is summed from the rounded totals one level below, so the
    daily totals, the category totals and the grand total agree exactly.
    An empty record set is a valid result with no days and a zero total.
    """
    ordered = sort_by_date(records)

    daily_summaries = tuple(
        DailySummary(
            date=day,
            categories=categories,
            daily_total=time_value(sum_hours(node.total.hours for node in categories)),
        )
        for day, categories in group_by_path(ordered).items()
    )

    # Итоги за весь период собираются из уже округлённых дневных деревьев
    overall = CategoryForest()
    for day in daily_summaries:
        overall.add_nodes(day.categories)

    grand_total = time_value(sum_hours(day.daily_total.hours for day in daily_summaries))

    logger.info(
        "Range summary %s..%s: records=%d, days=%d, total=%.2fh",
        start_date, end_date, len(ordered), len(daily_summaries), grand_total.hours,
    )
    return RangeSummary(
        start_date=start_date,
        end_date=end_date,
        daily_summaries=daily_summaries,
        category_totals=overall.freeze(),
        grand_total=grand_total,
    )
