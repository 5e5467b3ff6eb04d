"""Project service — CRUD for projects, scoped to the calling principal.

Learn: Every method takes the Principal explicitly. Reads resolve the
project and then apply the ownership rule; writes put the ownership
predicate in the UPDATE/DELETE itself so the check cannot race the write.
See auth/ownership.py for the policy.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.auth.dependencies import Principal
from tasktracker.auth.ownership import project_owned_by, require_found, require_owner
from tasktracker.db.models import Project, utcnow
from tasktracker.errors import ResourceKind, ResourceUnauthorized
from tasktracker.pagination import PageRequest

logger = structlog.get_logger()


class ProjectService:
    """Business logic for project CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_project(
        self,
        principal: Principal,
        name: str,
        description: Optional[str] = None,
    ) -> Project:
        project = Project(
            owner_id=principal.user_id,
            name=name,
            description=description,
        )
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        logger.info("project.created", project_id=project.id)
        return project

    # ─── Read ────────────────────────────────────────────

    async def get_project(self, principal: Principal, project_id: int) -> Project:
        """Fetch one project: 404 if it doesn't exist, 403 if it isn't yours."""
        project = require_found(
            await self.db.get(Project, project_id), ResourceKind.PROJECT
        )
        require_owner(principal, project.owner_id, ResourceKind.PROJECT)
        return project

    async def list_projects(
        self, principal: Principal, page: PageRequest
    ) -> tuple[list[Project], int]:
        """One page of the principal's projects, newest first, plus the total."""
        query = (
            select(Project)
            .where(project_owned_by(principal))
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
        result = await self.db.execute(query)
        projects = list(result.scalars().all())

        total = await self.db.scalar(
            select(func.count(Project.id)).where(project_owned_by(principal))
        )
        return projects, total or 0

    # ─── Update ──────────────────────────────────────────

    async def update_project(
        self,
        principal: Principal,
        project_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Project:
        """Apply non-None fields. 403 when the project is absent or not yours."""
        values: dict = {"updated_at": utcnow()}
        if name is not None:
            values["name"] = name
        if description is not None:
            values["description"] = description

        stmt = (
            update(Project)
            .where(Project.id == project_id, project_owned_by(principal))
            .values(**values)
            .returning(Project)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        project = result.scalars().first()
        if project is None:
            await self.db.rollback()
            raise ResourceUnauthorized(ResourceKind.PROJECT)

        await self.db.commit()
        logger.info("project.updated", project_id=project_id, fields=sorted(values))
        return project

    # ─── Delete ──────────────────────────────────────────

    async def delete_project(self, principal: Principal, project_id: int) -> None:
        """Delete a project (its tasks cascade). 403 when absent or not yours."""
        result = await self.db.execute(
            delete(Project)
            .where(Project.id == project_id, project_owned_by(principal))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise ResourceUnauthorized(ResourceKind.PROJECT)

        await self.db.commit()
        logger.info("project.deleted", project_id=project_id)
