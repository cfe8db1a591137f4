from datetime import datetime

import pytest

from taskflow.core.errors import ValidationFailed
from taskflow.models.task import Priority, Status
from taskflow.schemas.task import TaskCreate, TaskUpdate
from taskflow.services import task_service, user_service
from conftest import TestingSessionLocal, create_test_user


# ============ TESTS parse_due_date ============

def test_parse_due_date_date_only():
    assert task_service.parse_due_date("2025-03-01") == datetime(2025, 3, 1)


def test_parse_due_date_converts_to_utc():
    assert task_service.parse_due_date("2025-03-01T10:00:00+02:00") == datetime(2025, 3, 1, 8, 0)


@pytest.mark.parametrize("value", [None, ""])
def test_parse_due_date_empty(value):
    assert task_service.parse_due_date(value) is None


def test_parse_due_date_invalid():
    with pytest.raises(ValidationFailed):
        task_service.parse_due_date("demain")


# ============ TESTS task_service ============

def test_create_task_defaults_and_timestamps(db):
    user = create_test_user()
    task = task_service.create_task(db, TaskCreate(title="Service"), user.id)

    assert task.priority == Priority.medium
    assert task.status == Status.todo
    assert task.created_at == task.updated_at
    assert task.creator.id == user.id
    assert task.assigned_to is None


def test_get_update_delete_absent_are_soft(db):
    """Cible absente -> None / False, pas d'exception"""
    assert task_service.get_task(db, "absent") is None
    assert task_service.update_task(db, "absent", TaskUpdate(title="x")) is None
    assert task_service.delete_task(db, "absent") is False


def test_delete_task_returns_true_once(db):
    user = create_test_user()
    task = task_service.create_task(db, TaskCreate(title="Bye"), user.id)
    assert task_service.delete_task(db, task.id) is True
    assert task_service.delete_task(db, task.id) is False


def test_update_applies_only_provided_fields(db):
    user = create_test_user()
    task = task_service.create_task(
        db, TaskCreate(title="Orig", description="desc", dueDate="2025-03-01", priority="high"), user.id
    )

    updated = task_service.update_task(db, task.id, TaskUpdate(status="completed"))
    assert updated.status == Status.completed
    assert updated.title == "Orig"
    assert updated.description == "desc"
    assert updated.due_date == datetime(2025, 3, 1)
    assert updated.priority == Priority.high
    assert updated.updated_at >= updated.created_at


def test_concurrent_updates_last_write_wins():
    """Deux sessions, deux priorités : la dernière écriture gagne, aucune erreur"""
    user = create_test_user()
    setup = TestingSessionLocal()
    task = task_service.create_task(setup, TaskCreate(title="Course"), user.id)
    setup.close()

    first, second = TestingSessionLocal(), TestingSessionLocal()
    # les deux lisent avant d'écrire
    assert task_service.get_task(first, task.id) is not None
    assert task_service.get_task(second, task.id) is not None

    assert task_service.update_task(first, task.id, TaskUpdate(priority="low")) is not None
    assert task_service.update_task(second, task.id, TaskUpdate(priority="urgent")) is not None
    first.close()
    second.close()

    check = TestingSessionLocal()
    assert task_service.get_task(check, task.id).priority == Priority.urgent
    check.close()


def test_list_tasks_order_and_enrichment(db):
    creator = create_test_user(display_name="Créateur")
    assignee = create_test_user(display_name="Assigné")
    task_service.create_task(db, TaskCreate(title="Ancienne"), creator.id)
    task_service.create_task(db, TaskCreate(title="Récente", assignedToId=assignee.id), creator.id)

    tasks = task_service.list_tasks(db)
    assert [t.title for t in tasks] == ["Récente", "Ancienne"]
    assert tasks[0].assigned_to.display_name == "Assigné"
    assert tasks[0].creator.display_name == "Créateur"


# ============ TESTS user_service ============

def test_user_public_projection_has_no_hash(db):
    user = user_service.create_user(db, "dave", "dave@example.com", "password123")
    public = user_service.to_public(user).model_dump(by_alias=True)
    assert set(public) == {"id", "username", "email", "displayName", "createdAt"}


def test_update_user(db):
    user = create_test_user(display_name="Old")
    updated = user_service.update_user(db, user.id, display_name="New")
    assert updated.display_name == "New"
    assert user_service.update_user(db, "absent", display_name="x") is None
