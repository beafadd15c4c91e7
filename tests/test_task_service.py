"""TaskService の検証ルールのテスト"""

import pytest

from src.tasks import (
    UNSET,
    CreateTaskInput,
    NotFoundError,
    Priority,
    TaskRepository,
    TaskService,
    UpdateTaskInput,
    ValidationError,
)
from src.tasks.service import parse_task_id


@pytest.fixture
def service():
    repository = TaskRepository(":memory:")
    yield TaskService(repository)
    repository.close()


@pytest.mark.parametrize("payload", [{}, {"title": None}, {"title": "   "}, {"title": 42}, None])
def test_create_requires_title(service, payload):
    with pytest.raises(ValidationError) as excinfo:
        service.create_task(payload)
    assert excinfo.value.message == "Task title is required"


def test_title_is_checked_before_priority(service):
    with pytest.raises(ValidationError) as excinfo:
        service.create_task({"title": "", "priority": "urgent"})
    assert excinfo.value.message == "Task title is required"


def test_create_rejects_unknown_priority(service):
    with pytest.raises(ValidationError) as excinfo:
        service.create_task({"title": "Task", "priority": "urgent"})
    assert excinfo.value.message == "Priority must be high, medium, or low"


def test_create_trims_title_and_defaults_optional_fields(service):
    task = service.create_task({"title": "  Buy milk  ", "details": "", "priority": ""})

    assert task.title == "Buy milk"
    assert task.details is None
    assert task.priority is None
    assert task.due_date is None
    assert task.completed is False


def test_create_input_parses_all_fields():
    data = CreateTaskInput.from_payload(
        {"title": "Plan", "details": "Sprint", "priority": "medium", "due_date": "2025-06-01"}
    )
    assert data == CreateTaskInput(
        title="Plan", details="Sprint", priority=Priority.MEDIUM, due_date="2025-06-01"
    )


def test_update_input_distinguishes_omitted_from_null():
    data = UpdateTaskInput.from_payload({"details": None, "title": " New "})

    assert data.title == "New"
    assert data.details is None
    assert data.priority is UNSET
    assert data.due_date is UNSET


@pytest.mark.parametrize("raw", ["abc", "", "0", "-3", "1.5", "12abc", None, True])
def test_parse_task_id_rejects_invalid(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_task_id(raw)
    assert excinfo.value.message == "Valid task ID is required"


def test_parse_task_id_accepts_positive_integers():
    assert parse_task_id("17") == 17
    assert parse_task_id(3) == 3


def test_update_missing_task_is_not_found_regardless_of_body(service):
    with pytest.raises(NotFoundError) as excinfo:
        service.update_task("999", {"title": ""})
    assert excinfo.value.message == "Task not found"


def test_update_empty_title_message(service):
    task = service.create_task({"title": "Original"})

    with pytest.raises(ValidationError) as excinfo:
        service.update_task(task.id, {"title": "  "})
    assert excinfo.value.message == "Task title cannot be empty"


def test_update_priority_rules(service):
    task = service.create_task({"title": "Original", "priority": "high"})

    with pytest.raises(ValidationError) as excinfo:
        service.update_task(task.id, {"priority": "urgent"})
    assert excinfo.value.message == "Priority must be high, medium, or low"

    cleared = service.update_task(task.id, {"priority": None})
    assert cleared.priority is None


def test_update_with_empty_body_keeps_task(service):
    task = service.create_task({"title": "Same", "details": "d"})

    assert service.update_task(str(task.id), {}) == task


def test_update_rejects_non_string_details(service):
    task = service.create_task({"title": "Same"})

    with pytest.raises(ValidationError):
        service.update_task(task.id, {"details": ["not", "text"]})


def test_toggle_and_delete_flow(service):
    task = service.create_task({"title": "Buy milk"})

    assert service.toggle_task(str(task.id)).completed is True
    assert service.toggle_task(str(task.id)).completed is False

    assert service.delete_task(str(task.id)) == task.id
    with pytest.raises(NotFoundError):
        service.delete_task(str(task.id))
    with pytest.raises(NotFoundError):
        service.toggle_task(str(task.id))
    with pytest.raises(NotFoundError):
        service.get_task(str(task.id))


def test_invalid_id_is_rejected_before_store_access():
    class ExplodingRepository:
        def __getattr__(self, name):
            raise AssertionError(f"store accessed: {name}")

    service = TaskService(ExplodingRepository())
    for call in (service.get_task, service.toggle_task, service.delete_task):
        with pytest.raises(ValidationError):
            call("nope")
    with pytest.raises(ValidationError):
        service.update_task("nope", {"title": "x"})
