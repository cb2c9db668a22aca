"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST (status defaults to PENDING)
- TaskUpdate: what you PATCH (all optional; owner and createdAt never editable)
- TaskRead: what the API returns
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskhub.db.models import TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    """Partial update — only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None


class TaskRead(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    status: TaskStatus
    created_at: datetime
    owner_id: uuid.UUID

    model_config = {"from_attributes": True}
