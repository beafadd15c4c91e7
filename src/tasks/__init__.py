"""Task list management: store, validation service and HTTP client."""

from .exceptions import NotFoundError, StorageError, TaskError, ValidationError
from .models import UNSET, Priority, SortKey, StatusFilter, Task, TaskFilters
from .repository import TaskRepository
from .service import CreateTaskInput, TaskService, UpdateTaskInput

__all__ = [
    "Task",
    "TaskFilters",
    "Priority",
    "SortKey",
    "StatusFilter",
    "TaskRepository",
    "TaskService",
    "CreateTaskInput",
    "UpdateTaskInput",
    "TaskError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "UNSET",
]
