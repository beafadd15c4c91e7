"""Task Service

HTTPに依存しない検証ロジック。ルートから受け取った生のJSONを
CreateTaskInput / UpdateTaskInput に変換し、TaskRepositoryを呼び出す。

検証順序とメッセージはAPIの契約の一部なので変更しないこと。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from .exceptions import NotFoundError, ValidationError
from .models import (
    INVALID_ID_MESSAGE,
    INVALID_PRIORITY_MESSAGE,
    NOT_FOUND_MESSAGE,
    TITLE_EMPTY_MESSAGE,
    TITLE_REQUIRED_MESSAGE,
    UNSET,
    Priority,
    Task,
    TaskFilters,
)
from .repository import TaskRepository

logger = logging.getLogger(__name__)


def parse_task_id(raw: Any) -> int:
    """パスパラメータを正の整数IDに変換"""
    if isinstance(raw, bool):
        raise ValidationError(INVALID_ID_MESSAGE)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        raise ValidationError(INVALID_ID_MESSAGE)
    if value <= 0:
        raise ValidationError(INVALID_ID_MESSAGE)
    return value


def _optional_text(payload: Mapping[str, Any], key: str, message: str) -> Any:
    if key not in payload:
        return UNSET
    value = payload[key]
    if value is not None and not isinstance(value, str):
        raise ValidationError(message)
    return value


@dataclass(frozen=True)
class CreateTaskInput:
    title: str
    details: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateTaskInput":
        payload = payload if isinstance(payload, dict) else {}

        title = payload.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError(TITLE_REQUIRED_MESSAGE)

        raw_priority = payload.get("priority")
        priority = None
        if raw_priority:
            priority = Priority.parse(raw_priority)
            if priority is None:
                raise ValidationError(INVALID_PRIORITY_MESSAGE)

        details = _optional_text(payload, "details", "Details must be a string")
        due_date = _optional_text(payload, "due_date", "Due date must be a string")

        return cls(
            title=title.strip(),
            details=details or None,
            priority=priority,
            due_date=due_date or None,
        )


@dataclass(frozen=True)
class UpdateTaskInput:
    """部分更新の入力。各フィールドはUNSET（省略）/ None（クリア）/ 値 の3状態。"""

    title: Any = UNSET
    details: Any = UNSET
    priority: Any = UNSET
    due_date: Any = UNSET

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateTaskInput":
        """JSONオブジェクト以外のボディは空の更新として扱う"""
        payload = payload if isinstance(payload, dict) else {}

        title = UNSET
        if "title" in payload:
            raw_title = payload["title"]
            if not isinstance(raw_title, str) or not raw_title.strip():
                raise ValidationError(TITLE_EMPTY_MESSAGE)
            title = raw_title.strip()

        priority = UNSET
        if "priority" in payload:
            raw_priority = payload["priority"]
            if raw_priority is None:
                priority = None
            else:
                priority = Priority.parse(raw_priority)
                if priority is None:
                    raise ValidationError(INVALID_PRIORITY_MESSAGE)

        return cls(
            title=title,
            details=_optional_text(payload, "details", "Details must be a string"),
            priority=priority,
            due_date=_optional_text(payload, "due_date", "Due date must be a string"),
        )


class TaskService:
    """TaskRepositoryの前段でリクエスト単位の検証を行う。状態は持たない。"""

    def __init__(self, repository: TaskRepository):
        self.repository = repository

    def list_tasks(self, filters: Optional[TaskFilters] = None) -> List[Task]:
        return self.repository.query(filters or TaskFilters())

    def get_task(self, raw_id: Any) -> Task:
        task_id = parse_task_id(raw_id)
        return self._require(task_id)

    def create_task(self, payload: Any) -> Task:
        data = CreateTaskInput.from_payload(payload)
        return self.repository.create(
            title=data.title,
            details=data.details,
            priority=data.priority,
            due_date=data.due_date,
        )

    def update_task(self, raw_id: Any, payload: Any) -> Task:
        task_id = parse_task_id(raw_id)
        self._require(task_id)
        data = UpdateTaskInput.from_payload(payload)
        updated = self.repository.update(
            task_id,
            title=data.title,
            details=data.details,
            priority=data.priority,
            due_date=data.due_date,
        )
        if updated is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return updated

    def toggle_task(self, raw_id: Any) -> Task:
        task_id = parse_task_id(raw_id)
        self._require(task_id)
        toggled = self.repository.toggle_complete(task_id)
        if toggled is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return toggled

    def delete_task(self, raw_id: Any) -> int:
        task_id = parse_task_id(raw_id)
        self._require(task_id)
        if not self.repository.delete(task_id):
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return task_id

    def _require(self, task_id: int) -> Task:
        task = self.repository.get(task_id)
        if task is None:
            logger.info("Task not found: id=%s", task_id)
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return task
