"""TaskRepository の単体テスト"""

import threading
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from src.tasks import (
    UNSET,
    Priority,
    SortKey,
    StatusFilter,
    StorageError,
    TaskFilters,
    TaskRepository,
    ValidationError,
)


@pytest.fixture
def repo():
    """テストごとに新しいインメモリストア（作成時刻は1分ずつ進む）"""
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    ticks = count()
    repository = TaskRepository(":memory:", clock=lambda: base + timedelta(minutes=next(ticks)))
    yield repository
    repository.close()


def test_create_defaults(repo):
    task = repo.create(title="Buy milk")

    assert task.id > 0
    assert task.title == "Buy milk"
    assert task.completed is False
    assert task.details is None
    assert task.priority is None
    assert task.due_date is None
    assert task.created_at.startswith("2025-01-01T00:00")
    assert repo.get(task.id) == task


def test_create_rejects_blank_title_and_bad_priority(repo):
    with pytest.raises(ValidationError):
        repo.create(title="   ")
    with pytest.raises(ValidationError):
        repo.create(title="Task", priority="urgent")
    assert repo.list() == []


def test_schema_check_rejects_out_of_enum_priority(repo):
    """ストアを迂回した書き込みもCHECK制約で拒否される"""
    with pytest.raises(StorageError):
        with repo._transaction() as conn:
            conn.execute(
                "INSERT INTO tasks (title, priority, created_at) VALUES (?, ?, ?)",
                ("Sneaky", "urgent", "2025-01-01"),
            )


def test_update_merges_only_provided_fields(repo):
    task = repo.create(title="Write report", details="Q4", priority=Priority.HIGH, due_date="2025-12-01")

    updated = repo.update(task.id, title="Write final report")
    assert updated.title == "Write final report"
    assert updated.details == "Q4"
    assert updated.priority is Priority.HIGH
    assert updated.due_date == "2025-12-01"

    cleared = repo.update(task.id, details=None, priority=None, due_date=UNSET)
    assert cleared.details is None
    assert cleared.priority is None
    assert cleared.due_date == "2025-12-01"


def test_update_rejects_invalid_values_without_persisting(repo):
    task = repo.create(title="Keep me", priority="low")

    with pytest.raises(ValidationError):
        repo.update(task.id, title="")
    with pytest.raises(ValidationError):
        repo.update(task.id, details="changed", priority="critical")

    unchanged = repo.get(task.id)
    assert unchanged.title == "Keep me"
    assert unchanged.details is None
    assert unchanged.priority is Priority.LOW


def test_update_missing_returns_none(repo):
    assert repo.update(999, title="Nope") is None
    assert repo.update(999) is None


def test_toggle_is_an_involution(repo):
    task = repo.create(title="Flip", details="keep")

    once = repo.toggle_complete(task.id)
    assert once.completed is True
    assert once.details == "keep"

    twice = repo.toggle_complete(task.id)
    assert twice.completed is False
    assert repo.toggle_complete(12345) is None


def test_delete_is_terminal_and_ids_are_not_reused(repo):
    first = repo.create(title="First")
    assert repo.delete(first.id) is True
    assert repo.delete(first.id) is False
    assert repo.get(first.id) is None

    second = repo.create(title="Second")
    assert second.id > first.id


def test_query_filters_are_conjunctive(repo):
    repo.create(title="Buy groceries", details="Milk, eggs", priority="medium")
    high_active = repo.create(title="Finish report", priority="high")
    high_done = repo.create(title="Call plumber", priority="high")
    repo.toggle_complete(high_done.id)

    active = repo.query(TaskFilters(status=StatusFilter.ACTIVE))
    assert all(not t.completed for t in active)
    assert len(active) == 2

    completed = repo.query(TaskFilters(status=StatusFilter.COMPLETED))
    assert [t.id for t in completed] == [high_done.id]

    high = repo.query(TaskFilters(priority=Priority.HIGH))
    assert {t.id for t in high} == {high_active.id, high_done.id}

    both = repo.query(TaskFilters(status=StatusFilter.ACTIVE, priority=Priority.HIGH))
    assert [t.id for t in both] == [high_active.id]


def test_query_search_matches_title_or_details(repo):
    by_title = repo.create(title="Unique XYZ task")
    by_details = repo.create(title="Other", details="mentions XYZ here")
    repo.create(title="Unrelated")

    found = repo.query(TaskFilters(search="XYZ"))
    assert {t.id for t in found} == {by_title.id, by_details.id}


def test_query_search_treats_wildcards_literally(repo):
    repo.create(title="100% done")
    repo.create(title="1000 things")

    found = repo.query(TaskFilters(search="0%"))
    assert [t.title for t in found] == ["100% done"]


def test_sort_by_priority_rank(repo):
    repo.create(title="none")
    repo.create(title="low", priority="low")
    repo.create(title="high", priority="high")
    repo.create(title="medium", priority="medium")

    ordered = repo.query(TaskFilters(sort=SortKey.PRIORITY))
    assert [t.title for t in ordered] == ["high", "medium", "low", "none"]


def test_sort_by_due_date_ascending_nulls_first(repo):
    repo.create(title="march", due_date="2025-03-01")
    repo.create(title="undated")
    repo.create(title="january", due_date="2025-01-01")

    ordered = repo.query(TaskFilters(sort=SortKey.DUE_DATE))
    assert [t.title for t in ordered] == ["undated", "january", "march"]


def test_default_sort_is_newest_first(repo):
    repo.create(title="oldest")
    repo.create(title="middle")
    repo.create(title="newest")

    assert [t.title for t in repo.list()] == ["newest", "middle", "oldest"]


def test_sort_by_completed_puts_active_first(repo):
    done = repo.create(title="done")
    repo.toggle_complete(done.id)
    repo.create(title="todo")

    ordered = repo.query(TaskFilters(sort=SortKey.COMPLETED))
    assert [t.title for t in ordered] == ["todo", "done"]


def test_concurrent_toggles_do_not_lose_updates(repo):
    task = repo.create(title="Contended")

    def worker():
        for _ in range(25):
            repo.toggle_complete(task.id)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # 200回（偶数回）の反転で元に戻る
    assert repo.get(task.id).completed is False


def test_file_backed_store_persists(tmp_path):
    db_path = tmp_path / "nested" / "tasks.db"
    repo = TaskRepository(db_path=db_path)
    created = repo.create(title="Persist me")
    repo.close()

    reopened = TaskRepository(db_path=db_path)
    assert reopened.get(created.id).title == "Persist me"
    reopened.close()


def test_env_path_is_used_when_no_path_given(tmp_path, monkeypatch):
    db_path = tmp_path / "env_tasks.db"
    monkeypatch.setenv("TASKS_DB_PATH", str(db_path))
    repo = TaskRepository()
    assert repo.db_path == str(db_path)
    repo.close()


def test_seed_inserts_all_items(repo):
    created = repo.seed(
        [
            {"title": "Buy groceries", "priority": "medium"},
            {"title": "Read a book", "priority": "low", "details": None},
        ]
    )
    assert [t.title for t in created] == ["Buy groceries", "Read a book"]
    assert len(repo.list()) == 2


def test_id_beyond_sqlite_integer_range_is_missing(repo):
    huge = 2**63
    assert repo.get(huge) is None
    assert repo.update(huge, title="x") is None
    assert repo.toggle_complete(huge) is None
    assert repo.delete(huge) is False
