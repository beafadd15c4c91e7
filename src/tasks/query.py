"""Task一覧のSELECT文を組み立てるクエリビルダー

ユーザー入力は必ずプレースホルダ経由で渡し、ORDER BYは固定の候補からのみ選ぶ。
"""

from __future__ import annotations

from typing import List, Tuple

from .models import Priority, SortKey, StatusFilter, TaskFilters

PRIORITY_RANK_SQL = (
    "CASE priority"
    f" WHEN '{Priority.HIGH.value}' THEN 1"
    f" WHEN '{Priority.MEDIUM.value}' THEN 2"
    f" WHEN '{Priority.LOW.value}' THEN 3"
    " ELSE 4 END"
)

ORDER_BY = {
    SortKey.DUE_DATE: "due_date ASC, id ASC",
    SortKey.PRIORITY: f"{PRIORITY_RANK_SQL} ASC, id ASC",
    SortKey.CREATED_AT: "created_at DESC, id DESC",
    SortKey.COMPLETED: "completed ASC, id ASC",
}

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """LIKEのワイルドカードをリテラルとして扱うためにエスケープ"""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class TaskQuery:
    """WHERE句をAND結合で積み上げる小さなビルダー。"""

    def __init__(self, table: str = "tasks"):
        self._table = table
        self._conditions: List[str] = []
        self._params: List[object] = []
        self._order_by = ORDER_BY[SortKey.CREATED_AT]

    def where(self, condition: str, *params: object) -> "TaskQuery":
        self._conditions.append(condition)
        self._params.extend(params)
        return self

    def order_by(self, sort: SortKey) -> "TaskQuery":
        self._order_by = ORDER_BY.get(sort, ORDER_BY[SortKey.CREATED_AT])
        return self

    def build(self) -> Tuple[str, List[object]]:
        sql = f"SELECT * FROM {self._table}"
        if self._conditions:
            sql += " WHERE " + " AND ".join(self._conditions)
        sql += f" ORDER BY {self._order_by}"
        return sql, list(self._params)

    @classmethod
    def from_filters(cls, filters: TaskFilters) -> "TaskQuery":
        query = cls()
        if filters.search:
            pattern = f"%{escape_like(filters.search)}%"
            query.where(
                f"(title LIKE ? ESCAPE '{LIKE_ESCAPE}' OR details LIKE ? ESCAPE '{LIKE_ESCAPE}')",
                pattern,
                pattern,
            )
        if filters.status is StatusFilter.ACTIVE:
            query.where("completed = 0")
        elif filters.status is StatusFilter.COMPLETED:
            query.where("completed = 1")
        if filters.priority is not None:
            query.where("priority = ?", filters.priority.value)
        return query.order_by(filters.sort)
