"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic auto-generates migrations by comparing these
models to the actual DB.

Key concepts:
- BIGINT auto-increment primary keys (plain INTEGER on SQLite so rowid
  aliasing still hands out ids)
- Ownership lives on projects only; tasks reach their owner through
  project_id, never through a copied column
- TaskStatus is persisted through a TypeDecorator with an explicit mapping
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

BigId = BigInteger().with_variant(Integer, "sqlite")
# Largest value a signed 64-bit BIGINT (or SQLite INTEGER) column can hold.
MAX_ID = 2**63 - 1


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    """Task lifecycle states as exposed over the API."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


# Storage mapping, version 1. Changing a stored string requires a data
# migration and a new mapping version.
TASK_STATUS_STORAGE_V1: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "pending",
    TaskStatus.IN_PROGRESS: "in_progress",
    TaskStatus.COMPLETED: "completed",
}
_TASK_STATUS_FROM_STORAGE_V1 = {v: k for k, v in TASK_STATUS_STORAGE_V1.items()}


class UnknownTaskStatusError(ValueError):
    """Raised when the database holds a status string outside the mapping."""


class TaskStatusType(TypeDecorator):
    """Maps TaskStatus <-> its v1 storage string; rejects unknown values."""

    impl = String(20)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return TASK_STATUS_STORAGE_V1[TaskStatus(value)]

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            return _TASK_STATUS_FROM_STORAGE_V1[value]
        except KeyError:
            raise UnknownTaskStatusError(
                f"Unknown task status in storage: {value!r}"
            ) from None


class User(Base):
    """A credential: username plus password hash.

    Learn: The API never returns password_hash. Principals are rebuilt
    from this row on every authenticated request.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    projects: Mapped[list["Project"]] = relationship(
        back_populates="owner", passive_deletes=True
    )


class Project(Base):
    """A project owned by exactly one user. Root of the ownership chain."""

    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_owner_created", "owner_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        BigId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )

    owner: Mapped["User"] = relationship(back_populates="projects")
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="project", passive_deletes=True
    )


class Task(Base):
    """A unit of work inside a project.

    Learn: There is deliberately no owner column here. Every ownership
    check joins through project_id to projects.owner_id.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_project_status", "project_id", "status"),
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')",
            name="ck_tasks_status_v1",
        ),
    )

    id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        BigId, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        TaskStatusType(), nullable=False, default=TaskStatus.PENDING
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )

    project: Mapped["Project"] = relationship(back_populates="tasks")
