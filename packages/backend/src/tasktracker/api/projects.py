"""Project API routes.

Learn: Routes translate HTTP to service calls; the service layer owns
the ownership rules and raises the errors that become 403/404 responses.
The whole router is mounted behind authenticate (see api/__init__.py),
and each handler receives the Principal as an explicit parameter.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.auth.dependencies import Principal, current_principal
from tasktracker.db.engine import get_db
from tasktracker.db.models import MAX_ID
from tasktracker.pagination import page_request
from tasktracker.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate
from tasktracker.services.project_service import ProjectService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


def _envelope(project) -> dict:
    return {"status": "success", "data": {"project": ProjectRead.model_validate(project)}}


@router.post("/projects")
async def create_project(
    body: ProjectCreate,
    principal: Principal = Depends(current_principal),
    svc: ProjectService = Depends(_svc),
):
    project = await svc.create_project(
        principal, name=body.name, description=body.description
    )
    return _envelope(project)


@router.get("/projects")
async def list_projects(
    page: Optional[int] = Query(None, le=MAX_ID, description="1-based page number"),
    limit: Optional[int] = Query(None, le=MAX_ID, description="Page size (default 10)"),
    principal: Principal = Depends(current_principal),
    svc: ProjectService = Depends(_svc),
):
    """List the caller's projects, newest first."""
    req = page_request(page, limit)
    projects, total = await svc.list_projects(principal, req)
    return {
        "status": "success",
        "data": {
            "projects": [ProjectRead.model_validate(p) for p in projects],
            "pagination": req.meta(total),
        },
    }


@router.get("/projects/{project_id}")
async def get_project(
    project_id: int = Path(..., le=MAX_ID),
    principal: Principal = Depends(current_principal),
    svc: ProjectService = Depends(_svc),
):
    return _envelope(await svc.get_project(principal, project_id))


@router.put("/projects/{project_id}")
async def update_project(
    body: ProjectUpdate,
    project_id: int = Path(..., le=MAX_ID),
    principal: Principal = Depends(current_principal),
    svc: ProjectService = Depends(_svc),
):
    """Partially update a project (name, description)."""
    project = await svc.update_project(
        principal, project_id, name=body.name, description=body.description
    )
    return _envelope(project)


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int = Path(..., le=MAX_ID),
    principal: Principal = Depends(current_principal),
    svc: ProjectService = Depends(_svc),
):
    await svc.delete_project(principal, project_id)
    return {"status": "success", "message": "Project deleted"}
