"""
MoCo API v1 client.

Wraps an httpx.AsyncClient: authentication header, header-based pagination,
status -> error mapping and validation of every record into the models of
schemas.moco. Absence classification happens here, once, from configured
assignment codes.
"""

import logging
import math
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from moco_reports.core.config import settings
from moco_reports.core.dates import year_bounds
from moco_reports.core.errors import InvalidResponse, NetworkError, NotFound, error_for_status
from moco_reports.schemas.moco import (
    Absence,
    AbsenceKind,
    Activity,
    HolidayEntitlement,
    Presence,
    Project,
    Schedule,
    Task,
)
from moco_reports.services.projects import project_tasks, search_projects

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_ABSENCE_TYPE = "Absence"


class AbsenceClassifier:
    """Maps schedule assignment codes to AbsenceKind."""

    def __init__(
        self,
        vacation_codes: list[str],
        sick_day_codes: list[str],
        public_holiday_codes: list[str],
    ) -> None:
        self._kinds: dict[str, AbsenceKind] = {}
        for code in public_holiday_codes:
            self._kinds[code] = AbsenceKind.PUBLIC_HOLIDAY
        for code in sick_day_codes:
            self._kinds[code] = AbsenceKind.SICK_DAY
        for code in vacation_codes:
            self._kinds[code] = AbsenceKind.VACATION

    @classmethod
    def from_settings(cls) -> "AbsenceClassifier":
        return cls(
            vacation_codes=settings.VACATION_ABSENCE_CODES,
            sick_day_codes=settings.SICK_DAY_ABSENCE_CODES,
            public_holiday_codes=settings.PUBLIC_HOLIDAY_ABSENCE_CODES,
        )

    def classify(self, schedule: Schedule) -> Absence | None:
        """Absence for an Absence-type schedule entry, None for anything else."""
        assignment = schedule.assignment
        if assignment is None or assignment.type != _ABSENCE_TYPE:
            return None
        kind = self._kinds.get(assignment.code or "", AbsenceKind.OTHER)
        return Absence(
            id=schedule.id,
            date=schedule.date,
            kind=kind,
            name=assignment.name,
            comment=schedule.comment,
            am=schedule.am,
            pm=schedule.pm,
        )


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.moco_base_url,
        headers={
            "Authorization": f"Token token={settings.MOCO_API_KEY}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        timeout=settings.MOCO_API_TIMEOUT_SEC,
        follow_redirects=True,
    )


def _parse_records(model: type[ModelT], payload: Any, endpoint: str) -> list[ModelT]:
    if not isinstance(payload, list):
        raise InvalidResponse(f"Unexpected response from {endpoint}: expected a list")
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError as exc:
        logger.warning("MoCo %s: invalid record: %s", endpoint, exc)
        raise InvalidResponse(f"Unexpected record format from {endpoint}: {exc.error_count()} errors")


def _json(response: httpx.Response, endpoint: str) -> Any:
    try:
        return response.json()
    except ValueError:
        raise InvalidResponse(f"Unexpected response from {endpoint}: body is not JSON")


def _header_int(response: httpx.Response, name: str) -> int | None:
    raw = response.headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class MocoClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        classifier: AbsenceClassifier | None = None,
    ) -> None:
        self._http = http
        self._classifier = classifier or AbsenceClassifier.from_settings()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> httpx.Response:
        logger.debug("MoCo GET %s params=%s", endpoint, params)
        try:
            resp = await self._http.get(endpoint, params=params)
        except httpx.TransportError as exc:
            logger.warning("MoCo %s request failed: %s", endpoint, exc)
            raise NetworkError()

        if resp.is_error:
            logger.warning("MoCo %s returned HTTP %d", endpoint, resp.status_code)
            raise error_for_status(resp.status_code)
        return resp

    async def _fetch_one(self, model: type[ModelT], endpoint: str, params: dict[str, Any] | None = None) -> list[ModelT]:
        resp = await self._get(endpoint, params)
        return _parse_records(model, _json(resp, endpoint), endpoint)

    async def _fetch_all(self, model: type[ModelT], endpoint: str, params: dict[str, Any] | None = None) -> list[ModelT]:
        """
        Follow X-Page / X-Per-Page / X-Total headers until the last page.

        Without pagination headers the first response is the whole result.
        Records repeated across pages (same id) are kept once.
        """
        items: list[ModelT] = []
        seen_ids: set[Any] = set()
        page = 1
        while True:
            resp = await self._get(endpoint, {**(params or {}), "page": page})
            for item in _parse_records(model, _json(resp, endpoint), endpoint):
                item_id = getattr(item, "id", None)
                if item_id is not None:
                    if item_id in seen_ids:
                        continue
                    seen_ids.add(item_id)
                items.append(item)

            total = _header_int(resp, "X-Total")
            per_page = _header_int(resp, "X-Per-Page")
            if total is None or not per_page or _header_int(resp, "X-Page") is None:
                break
            total_pages = math.ceil(total / per_page)
            if page >= total_pages:
                break
            page += 1

        logger.debug("MoCo %s: %d records in %d page(s)", endpoint, len(items), page)
        return items

    # ------------------------------------------------------------------
    # Activities / projects
    # ------------------------------------------------------------------

    async def get_activities(
        self, start: date, end: date, project_id: int | None = None
    ) -> list[Activity]:
        params: dict[str, Any] = {"from": start.isoformat(), "to": end.isoformat()}
        if project_id:
            params["project_id"] = project_id
        return await self._fetch_all(Activity, "/activities", params)

    async def get_projects(self) -> list[Project]:
        return await self._fetch_all(Project, "/projects/assigned")

    async def search_projects(self, query: str) -> list[Project]:
        # У MoCo нет полнотекстового поиска, фильтруем на клиенте
        return search_projects(await self.get_projects(), query)

    async def get_project_tasks(self, project_id: int) -> list[Task]:
        return project_tasks(await self.get_projects(), project_id)

    # ------------------------------------------------------------------
    # Presences / absences
    # ------------------------------------------------------------------

    async def get_user_presences(self, start: date, end: date) -> list[Presence]:
        return await self._fetch_all(
            Presence, "/users/presences", {"from": start.isoformat(), "to": end.isoformat()}
        )

    async def get_holiday_entitlements(self, year: int) -> list[HolidayEntitlement]:
        """Entitlements of the year; a 404 means no data has been entered yet."""
        try:
            return await self._fetch_one(HolidayEntitlement, "/users/holidays", {"year": year})
        except NotFound:
            logger.info("No holiday entitlement data for year=%d", year)
            return []

    async def get_schedules(self, start: date, end: date) -> list[Schedule]:
        return await self._fetch_one(
            Schedule, "/schedules", {"from": start.isoformat(), "to": end.isoformat()}
        )

    async def get_absences(self, year: int, kind: AbsenceKind) -> list[Absence]:
        start, end = year_bounds(year)
        schedules = await self.get_schedules(start, end)
        absences = [
            absence
            for absence in (self._classifier.classify(s) for s in schedules)
            if absence is not None and absence.kind == kind
        ]
        logger.debug(
            "Schedules %d: total=%d, %s=%d", year, len(schedules), kind.value, len(absences)
        )
        return absences
