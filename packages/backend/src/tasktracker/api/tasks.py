"""Task API routes.

Key patterns:
- POST /tasks names its project in the body; the service checks that the
  caller owns it before inserting
- GET /tasks lists across all of the caller's projects, optional ?status=
- PUT for partial updates (only provided fields change)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.auth.dependencies import Principal, current_principal
from tasktracker.db.engine import get_db
from tasktracker.db.models import MAX_ID, TaskStatus
from tasktracker.pagination import page_request
from tasktracker.schemas.task import TaskCreate, TaskRead, TaskUpdate
from tasktracker.services.task_service import TaskService

router = APIRouter()


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


def _envelope(task) -> dict:
    return {"status": "success", "data": {"task": TaskRead.model_validate(task)}}


@router.post("/tasks")
async def create_task(
    body: TaskCreate,
    principal: Principal = Depends(current_principal),
    svc: TaskService = Depends(_task_svc),
):
    """Create a new task in 'Pending' status."""
    task = await svc.create_task(
        principal,
        project_id=body.project_id,
        title=body.title,
        description=body.description,
        due_date=body.due_date,
    )
    return _envelope(task)


@router.get("/tasks")
async def list_tasks(
    page: Optional[int] = Query(None, le=MAX_ID, description="1-based page number"),
    limit: Optional[int] = Query(None, le=MAX_ID, description="Page size (default 10)"),
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    principal: Principal = Depends(current_principal),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks with an optional status filter."""
    req = page_request(page, limit)
    tasks, total = await svc.list_tasks(principal, req, status=status)
    return {
        "status": "success",
        "data": {
            "tasks": [TaskRead.model_validate(t) for t in tasks],
            "pagination": req.meta(total),
        },
    }


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: int = Path(..., le=MAX_ID),
    principal: Principal = Depends(current_principal),
    svc: TaskService = Depends(_task_svc),
):
    """Get a single task by ID."""
    return _envelope(await svc.get_task(principal, task_id))


@router.put("/tasks/{task_id}")
async def update_task(
    body: TaskUpdate,
    task_id: int = Path(..., le=MAX_ID),
    principal: Principal = Depends(current_principal),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (title, description, status, due_date)."""
    task = await svc.update_task(
        principal,
        task_id,
        title=body.title,
        description=body.description,
        status=body.status,
        due_date=body.due_date,
    )
    return _envelope(task)


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: int = Path(..., le=MAX_ID),
    principal: Principal = Depends(current_principal),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(principal, task_id)
    return {"status": "success", "message": "Task deleted successfully"}
