"""Pydantic schemas for the FastAPI server."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.tasks import Priority


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str


class ErrorResponse(BaseModel):
    """Uniform error payload."""

    error: str


class TaskResponse(BaseModel):
    """Serialized task."""

    model_config = ConfigDict(use_enum_values=True)

    id: int
    title: str
    details: Optional[str] = None
    completed: int = Field(..., description="0 = active, 1 = completed")
    priority: Optional[Priority] = None
    due_date: Optional[str] = None
    created_at: str



class TaskDeleteResponse(BaseModel):
    """Response for task deletion."""

    message: str
    id: int
