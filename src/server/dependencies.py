"""Dependency helpers shared across FastAPI routes."""

from __future__ import annotations

from fastapi import Request

from src.tasks import Task, TaskRepository, TaskService
from src.tasks.repository import SAMPLE_TASKS
from src.task_manager import Config

from .schemas import TaskResponse


def build_task_service(config: Config) -> TaskService:
    """Create the shared TaskService from configuration."""
    repository = TaskRepository(db_path=config.database.path)
    if config.database.seed_sample_tasks and not repository.list():
        repository.seed(SAMPLE_TASKS)
    return TaskService(repository)


def get_task_service(request: Request) -> TaskService:
    """TaskService injected into the app at startup."""
    return request.app.state.task_service


def serialize_task(item: Task) -> TaskResponse:
    """Convert domain Task to API response."""
    return TaskResponse(**item.to_dict())
