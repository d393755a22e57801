"""
Plain-text rendering of report summaries (the /report endpoints).
"""

from typing import Sequence

from moco_reports.schemas.moco import Project, Task
from moco_reports.schemas.reports import (
    CategoryNode,
    FlatRangeSummary,
    HolidaySummary,
    PublicHolidaySummary,
    RangeSummary,
    SickDaySummary,
    TimeValue,
)

ACTIVITY_LEVELS = ("Project", "Task")


def fmt_number(value: float) -> str:
    """7.50 -> "7.5", 8.0 -> "8"."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def fmt_time(value: TimeValue) -> str:
    return f"{fmt_number(value.hours)}h ({value.hours_formatted})"


def _day_word(days: float) -> str:
    return "day" if days == 1 else "days"


def _level_label(depth: int, labels: Sequence[str]) -> str:
    return labels[depth] if depth < len(labels) else "Category"


def _render_nodes(
    nodes: Sequence[CategoryNode],
    lines: list[str],
    labels: Sequence[str],
    depth: int = 0,
    indent: str = "  ",
    bullet: str = "",
) -> None:
    for node in nodes:
        label = _level_label(depth, labels)
        pad = indent * (depth + 1) if indent else "  " * depth
        lines.append(f"{pad}{bullet}{label} {node.id} ({node.name}): {fmt_time(node.total)}")
        _render_nodes(node.children, lines, labels, depth + 1, indent, bullet)


def render_activities(summary: RangeSummary, project_id: int | None = None) -> str:
    if not summary.daily_summaries:
        return f"No activities found in the period {summary.start_date} to {summary.end_date}."

    suffix = f" (filtered by project ID: {project_id})" if project_id else ""
    lines = [f"Activities from {summary.start_date} to {summary.end_date}{suffix}:", ""]

    for day in summary.daily_summaries:
        lines.append(f"{day.date}:")
        _render_nodes(day.categories, lines, ACTIVITY_LEVELS)
        lines.append(f"  Daily total: {fmt_time(day.daily_total)}")
        lines.append("")

    if summary.category_totals:
        lines.append("Project totals (overall):")
        _render_nodes(summary.category_totals, lines, ACTIVITY_LEVELS, depth=0, indent="", bullet="- ")
        lines.append("")

    lines.append(f"Grand total: {fmt_time(summary.grand_total)}")
    return "\n".join(lines)


def render_presences(summary: FlatRangeSummary) -> str:
    if not summary.entries:
        return f"No presences found in the period {summary.start_date} to {summary.end_date}."

    lines = [f"Presences from {summary.start_date} to {summary.end_date}:", "", "Daily presences:"]
    for entry in summary.entries:
        lines.append(f"- {entry.date}: {fmt_time(entry.value)}")
    lines.append("")
    lines.append(f"Grand total: {fmt_time(summary.total)}")
    lines.append("")
    lines.append("Statistics:")
    lines.append(f"- Working days: {summary.working_days}")
    lines.append(f"- Average per day: {fmt_time(summary.average_per_day)}")
    return "\n".join(lines)


def _render_absence_entries(summary: HolidaySummary | SickDaySummary, title: str, lines: list[str]) -> None:
    lines.append(title)
    for entry in summary.entries:
        days = entry.days or 0.0
        line = f"- {entry.date}: {fmt_number(days)} {_day_word(days)}"
        if entry.note:
            line += f" ({entry.note})"
        lines.append(line)
    lines.append("")


def render_holidays(summary: HolidaySummary) -> str:
    lines = [f"Holiday overview for {summary.year}:", ""]
    if summary.entries:
        _render_absence_entries(summary, "Taken holiday days:", lines)
    else:
        lines.extend(["No holiday days found.", ""])

    taken = fmt_number(summary.total_taken_days)
    entitled = fmt_number(summary.annual_entitlement_days)
    lines.append("Summary:")
    lines.append(f"- Taken vacation: {taken} days")
    if summary.annual_entitlement_days > 0:
        lines.append(f"- Annual entitlement: {entitled} days")
        lines.append(f"- Utilization: {summary.utilization_percentage}% ({taken}/{entitled})")
        if summary.remaining_days is not None:
            lines.append(f"- Remaining vacation: {fmt_number(summary.remaining_days)} days")
    return "\n".join(lines)


def render_sick_days(summary: SickDaySummary) -> str:
    lines = [f"Sick days overview for {summary.year}:", ""]
    if summary.entries:
        _render_absence_entries(summary, "Taken sick days:", lines)
    else:
        lines.extend(["No sick days found.", ""])
    lines.append("Summary:")
    lines.append(f"- Total sick days: {fmt_number(summary.total_days)} days")
    return "\n".join(lines)


def render_public_holidays(summary: PublicHolidaySummary) -> str:
    if not summary.holidays:
        return f"No public holidays found for year {summary.year}."

    lines = [f"Public holidays for {summary.year}:", "", "Holiday dates:"]
    for holiday in summary.holidays:
        lines.append(f"- {holiday.date}: {holiday.name}")
    lines.append("")
    lines.append("Summary:")
    lines.append(f"- Total public holidays: {summary.total} days")
    lines.append(f"- Approximate working days: {summary.approximate_working_days} days")
    return "\n".join(lines)


def render_projects(projects: Sequence[Project], query: str | None = None) -> str:
    query = (query or "").strip()
    if not projects:
        return f'No projects found for search term "{query}".' if query else "No projects found."

    if query:
        lines = [f'Search results for "{query}" ({len(projects)} found):', ""]
    else:
        lines = [f"Assigned projects ({len(projects)}):", ""]

    for project in projects:
        lines.append(f"ID: {project.id}")
        lines.append(f"Name: {project.name}")
        if project.description:
            lines.append(f"Description: {project.description}")
        lines.append(f"Status: {'Active' if project.active else 'Inactive'}")
        if project.customer:
            lines.append(f"Customer: {project.customer.name}")
        if project.leader and not query:
            lines.append(f"Leader: {project.leader.firstname} {project.leader.lastname}")
        if project.budget and not query:
            lines.append(f"Budget: {fmt_number(project.budget)} {project.currency or ''}".rstrip())
        lines.append("")
    return "\n".join(lines).rstrip()


def render_project_tasks(tasks: Sequence[Task], project_id: int) -> str:
    if not tasks:
        return f"No tasks found for project {project_id}."

    lines = [f"Tasks for project {project_id} ({len(tasks)} found):", ""]
    for task in tasks:
        lines.append(f"ID: {task.id}")
        lines.append(f"Name: {task.name}")
        lines.append(f"Status: {'Active' if task.active else 'Inactive'}")
        lines.append(f"Billable: {'Yes' if task.billable else 'No'}")
        lines.append("")
    return "\n".join(lines).rstrip()
