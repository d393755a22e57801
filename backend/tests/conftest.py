"""
conftest.py: shared fixtures.

Strategy:
- The remote MoCo API is replaced by an httpx.MockTransport backed by
  FakeMoco: tests register JSON payloads (and optional headers / status)
  per endpoint path, and inspect the requests it received.
- `moco_client` is a MocoClient wired to that transport.
- `client` is an HTTPX client against the FastAPI app, with the
  get_moco_client dependency overridden to use the fake.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from moco_reports.api.deps import get_moco_client
from moco_reports.main import app
from moco_reports.services.moco_client import AbsenceClassifier, MocoClient

BASE_URL = "https://test-company.mocoapp.com/api/v1"


# ---------------------------------------------------------------------------
# Fake MoCo API
# ---------------------------------------------------------------------------


class FakeMoco:
    """Route table: path -> list of responses (one per call, last one repeats)."""

    def __init__(self) -> None:
        self._routes: dict[str, list[Callable[[httpx.Request], httpx.Response]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        payload: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                status_code,
                content=json.dumps(payload if payload is not None else []).encode(),
                headers={"Content-Type": "application/json", **(headers or {})},
            )

        self._routes.setdefault(path, []).append(respond)

    def add_error(self, path: str, exc: Exception) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self._routes.setdefault(path, []).append(respond)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        handlers = self._routes.get(path)
        if not handlers:
            return httpx.Response(404, json={"message": "not found"})
        calls = sum(1 for r in self.requests if r.url.path == request.url.path)
        return handlers[min(calls, len(handlers)) - 1](request)

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == f"/api/v1{path}"]


@pytest.fixture
def moco() -> FakeMoco:
    return FakeMoco()


@pytest.fixture
def classifier() -> AbsenceClassifier:
    return AbsenceClassifier(
        vacation_codes=["4"],
        sick_day_codes=["3"],
        public_holiday_codes=["2"],
    )


def _http_client(moco: FakeMoco) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.MockTransport(moco.handle),
        base_url=BASE_URL,
        headers={"Authorization": "Token token=test-api-key"},
    )


@pytest_asyncio.fixture
async def moco_client(moco: FakeMoco, classifier: AbsenceClassifier) -> MocoClient:
    async with _http_client(moco) as http:
        yield MocoClient(http, classifier)


# ---------------------------------------------------------------------------
# HTTP client fixture
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(moco: FakeMoco, classifier: AbsenceClassifier) -> AsyncClient:
    """App client whose MoCo dependency talks to the fake API."""

    async def _override():
        async with _http_client(moco) as http:
            yield MocoClient(http, classifier)

    app.dependency_overrides[get_moco_client] = _override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_moco_client, None)


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def activity(
    id: int,
    date: str,
    hours: float,
    project: tuple[int, str] = (123, "Website"),
    task: tuple[int, str] = (456, "Development"),
) -> dict:
    return {
        "id": id,
        "date": date,
        "hours": hours,
        "description": f"Activity {id}",
        "project": {"id": project[0], "name": project[1]},
        "task": {"id": task[0], "name": task[1]},
        "user": {"id": 1, "firstname": "Test", "lastname": "User"},
        "billable": True,
        "locked": False,
        "created_at": f"{date}T10:00:00Z",
        "updated_at": f"{date}T10:00:00Z",
    }


def presence(id: int, date: str, from_: str | None, to: str | None) -> dict:
    return {"id": id, "date": date, "from": from_, "to": to}


def schedule(
    id: int,
    date: str,
    code: str,
    name: str,
    am: bool | None = True,
    pm: bool | None = True,
    comment: str | None = None,
    type: str = "Absence",
) -> dict:
    return {
        "id": id,
        "date": date,
        "comment": comment,
        "am": am,
        "pm": pm,
        "assignment": {"id": 900 + id, "name": name, "code": code, "type": type},
    }


def project(id: int, name: str, description: str | None = None, tasks: list[dict] | None = None) -> dict:
    return {
        "id": id,
        "name": name,
        "description": description,
        "active": True,
        "currency": "EUR",
        "customer": {"id": 7, "name": "ACME"},
        "tasks": tasks or [],
    }
