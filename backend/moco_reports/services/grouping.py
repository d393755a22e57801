"""
Grouping engine: flat dated records -> per-day category forests.

Trees are accumulated in call-local builders and frozen into immutable
CategoryNode values before they leave this module. A parent's total is
the sum of its children's rounded totals, so every level of a report adds
up to the figures printed below it.
"""

import logging
from datetime import date
from typing import Iterable, Sequence

from moco_reports.core.errors import InvalidInput
from moco_reports.schemas.moco import CategorySegment, TimedRecord
from moco_reports.schemas.reports import CategoryNode
from moco_reports.services.time_format import round_hours, sum_hours, time_value

logger = logging.getLogger(__name__)


class _NodeBuilder:
    __slots__ = ("id", "name", "hours", "children")

    def __init__(self, segment: CategorySegment) -> None:
        self.id = segment.id
        self.name = segment.name
        # только значения, чей путь заканчивается на этом узле
        self.hours = 0.0
        self.children: dict[int | str, _NodeBuilder] = {}

    def freeze(self) -> CategoryNode:
        children = tuple(child.freeze() for child in self.children.values())
        return CategoryNode(
            id=self.id,
            name=self.name,
            total=time_value(sum_hours([self.hours, *(c.total.hours for c in children)])),
            children=children,
        )


class CategoryForest:
    """Mutable accumulator for one forest of category trees."""

    def __init__(self) -> None:
        self._roots: dict[int | str, _NodeBuilder] = {}

    def add(self, path: Sequence[CategorySegment], hours: float) -> None:
        """
        Add hours at the end of a category path, creating missing nodes.

        The first appearance of a node fixes its output position. A child is
        keyed by id under its parent only, so the same task id under two
        projects stays two nodes.
        """
        level = self._roots
        node: _NodeBuilder | None = None
        for segment in path:
            node = level.get(segment.id)
            if node is None:
                node = level[segment.id] = _NodeBuilder(segment)
            level = node.children
        if node is None:
            raise InvalidInput("Cannot add hours to an empty category path")
        node.hours += hours

    def add_nodes(
        self,
        nodes: Iterable[CategoryNode],
        parent_path: tuple[CategorySegment, ...] = (),
    ) -> None:
        """Accumulate already frozen trees (e.g. one per day) node by node."""
        for node in nodes:
            path = (*parent_path, CategorySegment(id=node.id, name=node.name))
            # собственный вклад узла: итог минус уже округлённые дети
            own = node.total.hours - sum_hours(c.total.hours for c in node.children)
            self.add(path, round_hours(own))
            self.add_nodes(node.children, path)

    def freeze(self) -> tuple[CategoryNode, ...]:
        return tuple(root.freeze() for root in self._roots.values())


def validate_record(record: TimedRecord) -> None:
    if record.value < 0:
        raise InvalidInput(
            f"Record on {record.date.isoformat()} has negative hours: {record.value}"
        )
    if not record.category_path:
        raise InvalidInput(
            f"Record on {record.date.isoformat()} has an empty category path"
        )


def sort_by_date(records: Iterable[TimedRecord]) -> list[TimedRecord]:
    """Stable sort by date; must run before grouping for reproducible category order."""
    return sorted(records, key=lambda r: r.date)


def group_forests(records: Sequence[TimedRecord]) -> dict[date, CategoryForest]:
    """
    Partition records into one CategoryForest per date, dates ascending.

    The whole batch is validated first: one bad record rejects the batch
    and no partial result is produced.
    """
    for record in records:
        validate_record(record)

    forests: dict[date, CategoryForest] = {}
    for record in records:
        forest = forests.get(record.date)
        if forest is None:
            forest = forests[record.date] = CategoryForest()
        forest.add(record.category_path, record.value)

    logger.debug("Grouped %d records into %d days", len(records), len(forests))
    return {day: forests[day] for day in sorted(forests)}


def group_by_path(records: Sequence[TimedRecord]) -> dict[date, tuple[CategoryNode, ...]]:
    return {day: forest.freeze() for day, forest in group_forests(records).items()}
