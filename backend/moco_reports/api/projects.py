from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import PlainTextResponse

from moco_reports.api.deps import get_moco_client
from moco_reports.schemas.moco import Project, Task
from moco_reports.services.moco_client import MocoClient
from moco_reports.services.report_text import render_project_tasks, render_projects

router = APIRouter()


async def _projects(client: MocoClient, query: str | None) -> list[Project]:
    if query and query.strip():
        return await client.search_projects(query)
    return await client.get_projects()


@router.get(
    "",
    response_model=list[Project],
    summary="Assigned projects, optionally filtered by name/description",
)
async def get_projects(
    query: str | None = Query(default=None, description="Case-insensitive search term"),
    client: MocoClient = Depends(get_moco_client),
) -> list[Project]:
    return await _projects(client, query)


@router.get("/report", response_class=PlainTextResponse, summary="Assigned projects as plain text")
async def get_projects_report(
    query: str | None = Query(default=None),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    return render_projects(await _projects(client, query), query)


@router.get(
    "/{project_id}/tasks",
    response_model=list[Task],
    summary="Tasks of an assigned project",
)
async def get_project_tasks(
    project_id: int = Path(..., gt=0),
    client: MocoClient = Depends(get_moco_client),
) -> list[Task]:
    return await client.get_project_tasks(project_id)


@router.get("/{project_id}/tasks/report", response_class=PlainTextResponse)
async def get_project_tasks_report(
    project_id: int = Path(..., gt=0),
    client: MocoClient = Depends(get_moco_client),
) -> str:
    return render_project_tasks(await client.get_project_tasks(project_id), project_id)
