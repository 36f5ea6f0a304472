"""
Task Schemas.

Pydantic schemas for the task-manager endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    """Schema for adding a task."""

    text: str = Field(..., min_length=1, max_length=500, examples=["Buy milk"])


class TaskResponse(BaseModel):
    """Schema for a task in API responses."""

    id: str
    text: str
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
