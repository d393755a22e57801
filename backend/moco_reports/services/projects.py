from typing import Sequence

from moco_reports.core.errors import ProjectNotAssigned
from moco_reports.schemas.moco import NamedRef, Project, Task


def search_projects(projects: Sequence[Project], query: str) -> list[Project]:
    """Case-insensitive substring search in name and description."""
    needle = query.strip().lower()
    if not needle:
        return list(projects)
    return [
        p for p in projects
        if needle in p.name.lower()
        or (p.description is not None and needle in p.description.lower())
    ]


def project_tasks(projects: Sequence[Project], project_id: int) -> list[Task]:
    project = next((p for p in projects if p.id == project_id), None)
    if project is None:
        raise ProjectNotAssigned(project_id)

    ref = NamedRef(id=project.id, name=project.name)
    return [
        Task(id=t.id, name=t.name, active=t.active, billable=t.billable, project=ref)
        for t in project.tasks
    ]
