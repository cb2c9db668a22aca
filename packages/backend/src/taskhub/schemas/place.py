"""Pydantic schemas for places."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PlaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)


class PlaceUpdate(BaseModel):
    """Partial update — only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)


class PlaceRead(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    address: Optional[str]
    created_at: datetime
    owner_id: uuid.UUID

    model_config = {"from_attributes": True}
