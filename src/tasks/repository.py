from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Optional, Union

from .exceptions import StorageError, ValidationError
from .models import (
    INVALID_PRIORITY_MESSAGE,
    TITLE_EMPTY_MESSAGE,
    TITLE_REQUIRED_MESSAGE,
    UNSET,
    Priority,
    Task,
    TaskFilters,
)
from .query import TaskQuery

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"
MAX_TASK_ID = 2**63 - 1

SAMPLE_TASKS = [
    {"title": "Buy groceries", "details": "Milk, eggs, bread", "priority": "medium"},
    {"title": "Read a book", "details": None, "priority": "low"},
    {"title": "Finish project report", "details": "Draft due by end of week", "priority": "high"},
]


class TaskRepository:
    """SQLiteベースのタスク管理。

    接続は1本を共有し、読み取り→書き込みの複合操作はロック内で1トランザクションとして実行する。
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        root = Path(__file__).resolve().parents[2]
        default_path = root / "data" / "tasks.db"
        env_path = os.getenv("TASKS_DB_PATH")
        if db_path:
            target = str(db_path)
        elif env_path:
            target = env_path
        else:
            target = str(default_path)
        if target != MEMORY_DB:
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = target
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(target, check_same_thread=False)
        except sqlite3.Error as exc:
            logger.exception("Failed to open task database %s", target)
            raise StorageError("Failed to open task database") from exc
        self._conn.row_factory = sqlite3.Row
        self._initialize()

    def _initialize(self) -> None:
        """tasksテーブルの作成"""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL CHECK (length(trim(title)) > 0),
                    details TEXT,
                    completed INTEGER NOT NULL DEFAULT 0 CHECK (completed IN (0, 1)),
                    priority TEXT CHECK (priority IN ('high', 'medium', 'low')) DEFAULT NULL,
                    due_date TEXT DEFAULT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_date)")

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                logger.exception("Task storage operation failed: %s", exc)
                raise StorageError("Task storage operation failed") from exc

    def _now(self) -> str:
        return self._clock().isoformat()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            title=row["title"],
            details=row["details"],
            completed=bool(row["completed"]),
            priority=Priority(row["priority"]) if row["priority"] else None,
            due_date=row["due_date"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, task_id: int) -> Optional[sqlite3.Row]:
        # SQLiteのINTEGERに収まらないIDの行は存在し得ない
        if task_id > MAX_TASK_ID:
            return None
        return conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()

    @staticmethod
    def _check_priority(priority: Any) -> Optional[str]:
        if priority is None:
            return None
        parsed = Priority.parse(priority)
        if parsed is None:
            raise ValidationError(INVALID_PRIORITY_MESSAGE)
        return parsed.value

    def query(self, filters: Optional[TaskFilters] = None) -> List[Task]:
        sql, params = TaskQuery.from_filters(filters or TaskFilters()).build()
        logger.debug("Task query: %s %s", sql, params)
        with self._transaction() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_task(row) for row in rows]

    def list(self) -> List[Task]:
        return self.query(TaskFilters())

    def get(self, task_id: int) -> Optional[Task]:
        with self._transaction() as conn:
            row = self._fetch(conn, task_id)
        return self._row_to_task(row) if row else None

    def create(
        self,
        title: str,
        details: Optional[str] = None,
        priority: Optional[Union[Priority, str]] = None,
        due_date: Optional[str] = None,
    ) -> Task:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError(TITLE_REQUIRED_MESSAGE)
        priority_value = self._check_priority(priority)

        with self._transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO tasks (title, details, completed, priority, due_date, created_at)
                VALUES (?, ?, 0, ?, ?, ?)
                """,
                (title, details, priority_value, due_date, self._now()),
            )
            row = self._fetch(conn, cursor.lastrowid)
        logger.info("Task created: id=%s", row["id"])
        return self._row_to_task(row)

    def update(
        self,
        task_id: int,
        *,
        title: Any = UNSET,
        details: Any = UNSET,
        priority: Any = UNSET,
        due_date: Any = UNSET,
    ) -> Optional[Task]:
        """指定されたフィールドだけを更新する。UNSETは現状維持、Noneはクリア。"""
        fields: list[str] = []
        params: list[object] = []

        if title is not UNSET:
            if not isinstance(title, str) or not title.strip():
                raise ValidationError(TITLE_EMPTY_MESSAGE)
            fields.append("title = ?")
            params.append(title)
        if details is not UNSET:
            fields.append("details = ?")
            params.append(details)
        if priority is not UNSET:
            fields.append("priority = ?")
            params.append(self._check_priority(priority))
        if due_date is not UNSET:
            fields.append("due_date = ?")
            params.append(due_date)

        with self._transaction() as conn:
            if self._fetch(conn, task_id) is None:
                return None
            if fields:
                conn.execute(
                    f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?",
                    [*params, task_id],
                )
            row = self._fetch(conn, task_id)
        logger.info("Task updated: id=%s fields=%s", task_id, len(fields))
        return self._row_to_task(row)

    def toggle_complete(self, task_id: int) -> Optional[Task]:
        with self._transaction() as conn:
            row = self._fetch(conn, task_id)
            if row is None:
                return None
            conn.execute(
                "UPDATE tasks SET completed = ? WHERE id = ?",
                (0 if row["completed"] else 1, task_id),
            )
            row = self._fetch(conn, task_id)
        logger.info("Task completion toggled: id=%s completed=%s", task_id, row["completed"])
        return self._row_to_task(row)

    def delete(self, task_id: int) -> bool:
        with self._transaction() as conn:
            if self._fetch(conn, task_id) is None:
                return False
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        logger.info("Task deleted: id=%s", task_id)
        return True

    def seed(self, items: Iterable[dict]) -> List[Task]:
        """初期データ投入用のヘルパー。"""
        created: List[Task] = []
        for item in items:
            created.append(
                self.create(
                    title=item.get("title", ""),
                    details=item.get("details"),
                    priority=item.get("priority"),
                    due_date=item.get("due_date"),
                )
            )
        return created

    def close(self) -> None:
        with self._lock:
            self._conn.close()
