from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class _Unset:
    """「未指定」を表す番兵。Noneは「値をクリア」の意味で使う。"""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

TITLE_REQUIRED_MESSAGE = "Task title is required"
TITLE_EMPTY_MESSAGE = "Task title cannot be empty"
INVALID_PRIORITY_MESSAGE = "Priority must be high, medium, or low"
INVALID_ID_MESSAGE = "Valid task ID is required"
NOT_FOUND_MESSAGE = "Task not found"
DELETED_MESSAGE = "Task deleted successfully"


class Priority(str, Enum):
    """タスク優先度。この3値以外は書き込み時に拒否する。"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, value: Any) -> Optional["Priority"]:
        """列挙値に変換する。範囲外ならNone。"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class StatusFilter(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class SortKey(str, Enum):
    """一覧の並び順。未知の値はCREATED_ATにフォールバック。"""

    DUE_DATE = "due_date"
    PRIORITY = "priority"
    CREATED_AT = "created_at"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any) -> "SortKey":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.CREATED_AT


@dataclass(slots=True)
class Task:
    """永続化済みタスクの表現。"""

    id: int
    title: str
    details: Optional[str]
    completed: bool
    priority: Optional[Priority]
    due_date: Optional[str]
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        """APIレスポンス形式（completedは0/1）に変換"""
        return {
            "id": self.id,
            "title": self.title,
            "details": self.details,
            "completed": 1 if self.completed else 0,
            "priority": self.priority.value if self.priority else None,
            "due_date": self.due_date,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class TaskFilters:
    """一覧取得の絞り込み・並び替え条件。

    範囲外の値はエラーにせず「条件なし」として扱う。
    """

    search: Optional[str] = None
    status: Optional[StatusFilter] = None
    priority: Optional[Priority] = None
    sort: SortKey = SortKey.CREATED_AT

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> "TaskFilters":
        try:
            status_value = StatusFilter(status) if status else None
        except ValueError:
            status_value = None
        return cls(
            search=search or None,
            status=status_value,
            priority=Priority.parse(priority),
            sort=SortKey.parse(sort),
        )
