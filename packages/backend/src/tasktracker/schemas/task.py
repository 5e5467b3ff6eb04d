"""Pydantic schemas for tasks.

- TaskCreate: what you POST to create a task (always starts Pending)
- TaskUpdate: what you PUT to modify a task (all optional)
- TaskRead: what the API returns
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tasktracker.db.models import MAX_ID, TaskStatus


class TaskCreate(BaseModel):
    project_id: int = Field(..., le=MAX_ID)
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None


class TaskRead(BaseModel):
    id: int
    project_id: int
    title: str
    description: Optional[str]
    status: TaskStatus
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
