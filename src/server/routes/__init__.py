"""Route registration helpers."""

from .tasks import register_task_routes

__all__ = ["register_task_routes"]
