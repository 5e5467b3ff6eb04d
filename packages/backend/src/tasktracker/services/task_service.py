"""Task service — CRUD for tasks, authorized through the parent project.

Learn: Tasks carry no owner column. Every check resolves ownership by
joining to projects.owner_id:

- create: the target project must exist and belong to the caller
  before anything is inserted (404 / 403 otherwise)
- get: one query returns the task together with its project's owner,
  then 404 if absent, 403 if someone else's
- update/delete: WHERE id = :id AND project_id IN (caller's projects),
  zero rows affected → 403
- list: joined to projects and filtered by owner in SQL
"""

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.auth.dependencies import Principal
from tasktracker.auth.ownership import (
    project_owned_by,
    require_found,
    require_owner,
    task_owned_by,
    task_with_owner,
)
from tasktracker.db.models import Project, Task, TaskStatus, utcnow
from tasktracker.errors import ResourceKind, ResourceUnauthorized
from tasktracker.pagination import PageRequest

logger = structlog.get_logger()


class TaskService:
    """Business logic for task CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        principal: Principal,
        project_id: int,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        """Create a task in 'Pending' status under one of the caller's projects."""
        project = require_found(
            await self.db.get(Project, project_id), ResourceKind.PROJECT
        )
        require_owner(principal, project.owner_id, ResourceKind.PROJECT)

        task = Task(
            project_id=project.id,
            title=title,
            description=description,
            status=TaskStatus.PENDING,
            due_date=due_date,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        logger.info("task.created", task_id=task.id, project_id=project.id)
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, principal: Principal, task_id: int) -> Task:
        """Fetch one task: 404 if it doesn't exist, 403 if it isn't yours."""
        result = await self.db.execute(task_with_owner(task_id))
        row = require_found(result.first(), ResourceKind.TASK)
        task, owner_id = row
        require_owner(principal, owner_id, ResourceKind.TASK)
        return task

    async def list_tasks(
        self,
        principal: Principal,
        page: PageRequest,
        status: Optional[TaskStatus] = None,
    ) -> tuple[list[Task], int]:
        """One page of the caller's tasks across all projects, newest first.

        Learn: The status filter is applied to both the page query and the
        count so total/total_pages describe the filtered set.
        """
        filters = [project_owned_by(principal)]
        if status is not None:
            filters.append(Task.status == status)

        query = (
            select(Task)
            .join(Project, Task.project_id == Project.id)
            .where(*filters)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
        result = await self.db.execute(query)
        tasks = list(result.scalars().all())

        total = await self.db.scalar(
            select(func.count(Task.id))
            .select_from(Task)
            .join(Project, Task.project_id == Project.id)
            .where(*filters)
        )
        return tasks, total or 0

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        principal: Principal,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TaskStatus] = None,
        due_date: Optional[datetime] = None,
    ) -> Task:
        """Apply non-None fields. 403 when the task is absent or not yours."""
        values: dict = {"updated_at": utcnow()}
        if title is not None:
            values["title"] = title
        if description is not None:
            values["description"] = description
        if status is not None:
            values["status"] = status
        if due_date is not None:
            values["due_date"] = due_date

        stmt = (
            update(Task)
            .where(Task.id == task_id, task_owned_by(principal))
            .values(**values)
            .returning(Task)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        task = result.scalars().first()
        if task is None:
            await self.db.rollback()
            raise ResourceUnauthorized(ResourceKind.TASK)

        await self.db.commit()
        logger.info("task.updated", task_id=task_id, fields=sorted(values))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, principal: Principal, task_id: int) -> None:
        """Delete a task. 403 when absent or not yours."""
        result = await self.db.execute(
            delete(Task)
            .where(Task.id == task_id, task_owned_by(principal))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise ResourceUnauthorized(ResourceKind.TASK)

        await self.db.commit()
        logger.info("task.deleted", task_id=task_id)
