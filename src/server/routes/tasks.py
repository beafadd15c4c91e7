"""Task endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException

from src.tasks import NotFoundError, TaskFilters, TaskService, ValidationError
from src.tasks.models import DELETED_MESSAGE

from ..dependencies import get_task_service, serialize_task
from ..schemas import (
    ErrorResponse,
    TaskDeleteResponse,
    TaskResponse,
)

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def register_task_routes(app: FastAPI, prefix: str = "", include_in_schema: bool = True) -> None:
    """Register task CRUD endpoints under the given prefix."""
    base = f"{prefix.rstrip('/')}/tasks"

    @app.get(
        base,
        response_model=List[TaskResponse],
        include_in_schema=include_in_schema,
        responses={500: {"model": ErrorResponse}},
    )
    async def list_tasks(
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
        service: TaskService = Depends(get_task_service),
    ) -> List[TaskResponse]:
        """List tasks with optional search, status/priority filters and sort order."""
        filters = TaskFilters.from_params(search=search, status=status, priority=priority, sort=sort)
        try:
            tasks = await asyncio.to_thread(service.list_tasks, filters)
            return [serialize_task(task) for task in tasks]
        except Exception as exc:
            logger.exception("Failed to fetch tasks: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to fetch tasks") from exc

    @app.get(
        f"{base}/{{task_id}}",
        response_model=TaskResponse,
        include_in_schema=include_in_schema,
        responses=ERROR_RESPONSES,
    )
    async def get_task(
        task_id: str, service: TaskService = Depends(get_task_service)
    ) -> TaskResponse:
        """Fetch a single task."""
        try:
            task = await asyncio.to_thread(service.get_task, task_id)
            return serialize_task(task)
        except (ValidationError, NotFoundError):
            raise
        except Exception as exc:
            logger.exception("Failed to fetch task %s: %s", task_id, exc)
            raise HTTPException(status_code=500, detail="Failed to fetch task") from exc

    @app.post(
        base,
        response_model=TaskResponse,
        status_code=201,
        include_in_schema=include_in_schema,
        responses=ERROR_RESPONSES,
    )
    async def create_task(
        payload: Any = Body(default=None),
        service: TaskService = Depends(get_task_service),
    ) -> TaskResponse:
        """Create a new task."""
        try:
            task = await asyncio.to_thread(service.create_task, payload)
            return serialize_task(task)
        except ValidationError:
            raise
        except Exception as exc:
            logger.exception("Failed to create task: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to create task") from exc

    @app.put(
        f"{base}/{{task_id}}",
        response_model=TaskResponse,
        include_in_schema=include_in_schema,
        responses=ERROR_RESPONSES,
    )
    async def update_task(
        task_id: str,
        payload: Any = Body(default=None),
        service: TaskService = Depends(get_task_service),
    ) -> TaskResponse:
        """Update the provided fields of an existing task.

        The body is taken raw so the id and existence checks run before it is inspected.
        """
        try:
            task = await asyncio.to_thread(service.update_task, task_id, payload)
            return serialize_task(task)
        except (ValidationError, NotFoundError):
            raise
        except Exception as exc:
            logger.exception("Failed to update task %s: %s", task_id, exc)
            raise HTTPException(status_code=500, detail="Failed to update task") from exc

    @app.patch(
        f"{base}/{{task_id}}/complete",
        response_model=TaskResponse,
        include_in_schema=include_in_schema,
        responses=ERROR_RESPONSES,
    )
    async def toggle_task(
        task_id: str, service: TaskService = Depends(get_task_service)
    ) -> TaskResponse:
        """Toggle the completion flag of a task."""
        try:
            task = await asyncio.to_thread(service.toggle_task, task_id)
            return serialize_task(task)
        except (ValidationError, NotFoundError):
            raise
        except Exception as exc:
            logger.exception("Failed to toggle task completion %s: %s", task_id, exc)
            raise HTTPException(
                status_code=500, detail="Failed to toggle task completion"
            ) from exc

    @app.delete(
        f"{base}/{{task_id}}",
        response_model=TaskDeleteResponse,
        include_in_schema=include_in_schema,
        responses=ERROR_RESPONSES,
    )
    async def delete_task(
        task_id: str, service: TaskService = Depends(get_task_service)
    ) -> TaskDeleteResponse:
        """Delete a task permanently."""
        try:
            deleted_id = await asyncio.to_thread(service.delete_task, task_id)
            return TaskDeleteResponse(message=DELETED_MESSAGE, id=deleted_id)
        except (ValidationError, NotFoundError):
            raise
        except Exception as exc:
            logger.exception("Failed to delete task %s: %s", task_id, exc)
            raise HTTPException(status_code=500, detail="Failed to delete task") from exc
