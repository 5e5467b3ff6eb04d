"""Pydantic schemas for projects.

Learn: Separate schemas for create/update/read keeps the API clean.
owner_id is never accepted from the client; it always comes from the
authenticated principal.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class ProjectUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class ProjectRead(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
