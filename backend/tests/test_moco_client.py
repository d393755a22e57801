"""
MoCo API client against a mocked transport.

Tests:
  - auth header and query parameters
  - header-based pagination and id de-duplication
  - HTTP status / transport error mapping
  - entitlement 404 fallback
  - absence classification by assignment code
  - project search and tasks
"""

from __future__ import annotations

from datetime import date

import httpx
import pytest

from moco_reports.core.errors import (
    AccessDenied,
    AuthFailed,
    InvalidParameters,
    InvalidResponse,
    MocoApiError,
    NetworkError,
    NotFound,
    ProjectNotAssigned,
    RateLimited,
    ServerError,
)
from moco_reports.schemas.moco import AbsenceKind, Schedule
from moco_reports.services.moco_client import AbsenceClassifier, MocoClient
from tests.conftest import FakeMoco, activity, presence, project, schedule


def _pages(total: int, per_page: int, page: int) -> dict[str, str]:
    return {"X-Page": str(page), "X-Per-Page": str(per_page), "X-Total": str(total)}


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    async def test_activities_query_params(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [activity(1, "2024-01-15", 2.0)])

        result = await moco_client.get_activities(date(2024, 1, 15), date(2024, 1, 19), project_id=123)

        assert len(result) == 1
        assert result[0].project.name == "Website"
        (request,) = moco.calls_to("/activities")
        assert request.url.params["from"] == "2024-01-15"
        assert request.url.params["to"] == "2024-01-19"
        assert request.url.params["project_id"] == "123"
        assert request.headers["Authorization"] == "Token token=test-api-key"

    async def test_no_project_filter_by_default(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [])
        assert await moco_client.get_activities(date(2024, 1, 1), date(2024, 1, 2)) == []
        (request,) = moco.calls_to("/activities")
        assert "project_id" not in request.url.params

    async def test_presences_endpoint(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/users/presences", [presence(1, "2024-01-15", "09:00", "17:30")])
        (p,) = await moco_client.get_user_presences(date(2024, 1, 1), date(2024, 1, 31))
        assert (p.from_time, p.to_time) == ("09:00", "17:30")

    async def test_schedules_cover_the_year(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/schedules", [])
        await moco_client.get_absences(2024, AbsenceKind.VACATION)
        (request,) = moco.calls_to("/schedules")
        assert request.url.params["from"] == "2024-01-01"
        assert request.url.params["to"] == "2024-12-31"


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class TestPagination:
    async def test_follows_pages_until_total(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [activity(1, "2024-01-15", 1), activity(2, "2024-01-15", 1)], headers=_pages(5, 2, 1))
        moco.add("/activities", [activity(3, "2024-01-16", 1), activity(4, "2024-01-16", 1)], headers=_pages(5, 2, 2))
        moco.add("/activities", [activity(5, "2024-01-17", 1)], headers=_pages(5, 2, 3))

        result = await moco_client.get_activities(date(2024, 1, 15), date(2024, 1, 17))

        assert [a.id for a in result] == [1, 2, 3, 4, 5]
        pages = [r.url.params["page"] for r in moco.calls_to("/activities")]
        assert pages == ["1", "2", "3"]
        # фильтры передаются на каждой странице
        assert all(r.url.params["from"] == "2024-01-15" for r in moco.calls_to("/activities"))

    async def test_without_headers_single_request(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [activity(1, "2024-01-15", 1)])
        await moco_client.get_activities(date(2024, 1, 15), date(2024, 1, 15))
        assert len(moco.calls_to("/activities")) == 1

    async def test_duplicates_across_pages_kept_once(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [activity(1, "2024-01-15", 1), activity(2, "2024-01-15", 1)], headers=_pages(4, 2, 1))
        moco.add("/activities", [activity(2, "2024-01-15", 1), activity(3, "2024-01-15", 1)], headers=_pages(4, 2, 2))

        result = await moco_client.get_activities(date(2024, 1, 15), date(2024, 1, 15))
        assert [a.id for a in result] == [1, 2, 3]

    async def test_error_on_later_page_propagates(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [activity(1, "2024-01-15", 1)], headers=_pages(2, 1, 1))
        moco.add("/activities", {"message": "boom"}, status_code=500)

        with pytest.raises(ServerError):
            await moco_client.get_activities(date(2024, 1, 15), date(2024, 1, 15))


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.parametrize(
        "code, exc_type, http_status",
        [
            (400, InvalidParameters, 400),
            (401, AuthFailed, 401),
            (403, AccessDenied, 403),
            (404, NotFound, 404),
            (422, InvalidParameters, 400),
            (429, RateLimited, 429),
            (500, ServerError, 502),
            (503, ServerError, 502),
        ],
    )
    async def test_status_mapping(
        self, moco: FakeMoco, moco_client: MocoClient, code: int, exc_type: type, http_status: int
    ) -> None:
        moco.add("/activities", {"message": "error"}, status_code=code)

        with pytest.raises(exc_type) as exc_info:
            await moco_client.get_activities(date(2024, 1, 1), date(2024, 1, 2))
        assert exc_info.value.upstream_status == code
        assert exc_info.value.http_status == http_status

    async def test_unknown_status_mentions_code(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", {}, status_code=418)

        with pytest.raises(MocoApiError) as exc_info:
            await moco_client.get_activities(date(2024, 1, 1), date(2024, 1, 2))
        assert "418" in exc_info.value.message

    async def test_transport_error(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add_error("/activities", httpx.ConnectError("connection refused"))

        with pytest.raises(NetworkError):
            await moco_client.get_activities(date(2024, 1, 1), date(2024, 1, 2))

    async def test_invalid_record_shape(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/activities", [{"id": 1, "date": "2024-01-15"}])

        with pytest.raises(InvalidResponse):
            await moco_client.get_activities(date(2024, 1, 1), date(2024, 1, 31))

    async def test_non_list_payload(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/users/presences", {"unexpected": True})

        with pytest.raises(InvalidResponse):
            await moco_client.get_user_presences(date(2024, 1, 1), date(2024, 1, 31))

    async def test_bad_clock_value(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/users/presences", [presence(1, "2024-01-15", "9 Uhr", "17:00")])

        with pytest.raises(InvalidResponse):
            await moco_client.get_user_presences(date(2024, 1, 1), date(2024, 1, 31))


# ---------------------------------------------------------------------------
# Holidays / absences
# ---------------------------------------------------------------------------


class TestEntitlements:
    async def test_returns_entries(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/users/holidays", [{"id": 1, "year": 2024, "title": "Urlaub 2024", "days": 25, "hours": 200}])

        (entry,) = await moco_client.get_holiday_entitlements(2024)
        assert entry.days == 25
        (request,) = moco.calls_to("/users/holidays")
        assert request.url.params["year"] == "2024"

    async def test_not_found_means_no_data(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/users/holidays", {"message": "not found"}, status_code=404)
        assert await moco_client.get_holiday_entitlements(2024) == []

    async def test_other_errors_propagate(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/users/holidays", {}, status_code=500)
        with pytest.raises(ServerError):
            await moco_client.get_holiday_entitlements(2024)


class TestAbsences:
    async def test_filters_by_kind(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add(
            "/schedules",
            [
                schedule(1, "2024-03-01", "4", "Urlaub"),
                schedule(2, "2024-03-02", "3", "Krankheit"),
                schedule(3, "2024-01-01", "2", "Neujahr"),
                schedule(4, "2024-03-03", "4", "Urlaub", type="Project"),
            ],
        )

        vacation = await moco_client.get_absences(2024, AbsenceKind.VACATION)
        sick = await moco_client.get_absences(2024, AbsenceKind.SICK_DAY)
        public = await moco_client.get_absences(2024, AbsenceKind.PUBLIC_HOLIDAY)

        assert [a.id for a in vacation] == [1]
        assert [a.id for a in sick] == [2]
        assert [(a.id, a.name) for a in public] == [(3, "Neujahr")]


class TestAbsenceClassifier:
    def _schedule(self, **assignment) -> Schedule:
        return Schedule.model_validate(
            {"id": 1, "date": "2024-03-01", "am": True, "pm": False, "assignment": assignment}
        )

    def test_integer_code_is_matched(self, classifier: AbsenceClassifier) -> None:
        absence = classifier.classify(self._schedule(id=9, name="Urlaub", code=4, type="Absence"))
        assert absence is not None
        assert absence.kind is AbsenceKind.VACATION
        assert (absence.am, absence.pm) == (True, False)

    def test_unknown_code_is_other(self, classifier: AbsenceClassifier) -> None:
        absence = classifier.classify(self._schedule(id=9, name="Elternzeit", code="7", type="Absence"))
        assert absence is not None
        assert absence.kind is AbsenceKind.OTHER

    def test_non_absence_schedule_ignored(self, classifier: AbsenceClassifier) -> None:
        assert classifier.classify(self._schedule(id=9, name="X", code="4", type="Project")) is None

    def test_no_assignment(self, classifier: AbsenceClassifier) -> None:
        bare = Schedule.model_validate({"id": 1, "date": "2024-03-01"})
        assert classifier.classify(bare) is None

    def test_custom_codes(self) -> None:
        custom = AbsenceClassifier(vacation_codes=["U"], sick_day_codes=["K"], public_holiday_codes=[])
        absence = custom.classify(self._schedule(name="Krank", code="K", type="Absence"))
        assert absence is not None
        assert absence.kind is AbsenceKind.SICK_DAY


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


PROJECTS = [
    project(1, "Website Relaunch", "Corporate site", tasks=[{"id": 10, "name": "Design"}, {"id": 11, "name": "Dev", "billable": False}]),
    project(2, "Mobile App", "iOS and Android"),
    project(3, "Intranet", None),
]


class TestProjects:
    async def test_assigned_projects(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/projects/assigned", PROJECTS)

        result = await moco_client.get_projects()
        assert [p.id for p in result] == [1, 2, 3]
        assert result[0].customer is not None and result[0].customer.name == "ACME"

    @pytest.mark.parametrize(
        "query, expected",
        [
            ("website", [1]),
            ("ANDROID", [2]),
            ("  ", [1, 2, 3]),
            ("nothing", []),
        ],
    )
    async def test_search(self, moco: FakeMoco, moco_client: MocoClient, query: str, expected: list[int]) -> None:
        moco.add("/projects/assigned", PROJECTS)
        assert [p.id for p in await moco_client.search_projects(query)] == expected

    async def test_tasks_of_project(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/projects/assigned", PROJECTS)

        design, dev = await moco_client.get_project_tasks(1)
        assert (design.name, design.billable) == ("Design", True)
        assert dev.billable is False
        assert dev.project.name == "Website Relaunch"

    async def test_unassigned_project(self, moco: FakeMoco, moco_client: MocoClient) -> None:
        moco.add("/projects/assigned", PROJECTS)

        with pytest.raises(ProjectNotAssigned) as exc_info:
            await moco_client.get_project_tasks(99)
        assert exc_info.value.project_id == 99
        assert exc_info.value.http_status == 404
