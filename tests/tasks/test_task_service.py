from __future__ import annotations

from datetime import date, datetime

import pytest

from src.shift_tasks.shift_tasks.auth.model import Claim
from src.shift_tasks.shift_tasks.core.enums import Role, Shift, TaskStatus, TaskStatusFilter
from src.shift_tasks.shift_tasks.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.shift_tasks.shift_tasks.tasks.service import TaskQuery, TaskService, parse_task_query


@pytest.fixture
def service(tasks_repo, users_repo, positions_repo):
    return TaskService(tasks_repo, users_repo, positions_repo)


@pytest.fixture
def seeded(tasks_repo, users_repo, make_task, make_user):
    tasks_repo.add(make_task("t-today", position_id="pos-1", due_date=datetime(2026, 3, 11, 9, 0)))
    tasks_repo.add(make_task("t-yesterday", position_id="pos-1", due_date=datetime(2026, 3, 10, 9, 0)))
    tasks_repo.add(
        make_task(
            "t-done",
            position_id="pos-1",
            status=TaskStatus.COMPLETED,
            completed_by_id="emp-1",
            due_date=datetime(2026, 3, 9, 9, 0),
        )
    )
    tasks_repo.add(make_task("t-other", position_id="pos-2", shift=Shift.NIGHT))

    users_repo.add(make_user("emp-1", "Ana", position_ids=("pos-1",)))
    users_repo.add(make_user("sup-1", "Luis", role=Role.SUPERVISOR, position_ids=("pos-1", "pos-2")))
    users_repo.add(make_user("emp-2", "Marta", position_ids=("pos-2",)))
    users_repo.add(make_user("admin-1", "Administrador", role=Role.ADMIN, position_ids=("pos-4",)))


# -------- parse_task_query --------
def test_parse_query_blank_values_mean_no_filter():
    query = parse_task_query({"status": "", "positionId": "  ", "shift": None})

    assert query == TaskQuery()


def test_parse_query_reads_all_filters():
    query = parse_task_query(
        {
            "positionId": "pos-1",
            "status": "OVERDUE",
            "shift": "NIGHT",
            "startDate": "2026-03-01",
            "endDate": "2026-03-31",
            "date": "2026-03-11",
        }
    )

    assert query.status == TaskStatusFilter.OVERDUE
    assert query.shift == Shift.NIGHT
    assert query.start_date == date(2026, 3, 1)
    assert query.on_date == date(2026, 3, 11)


def test_parse_query_rejects_unknown_status():
    with pytest.raises(ValidationError):
        parse_task_query({"status": "DONE"})


def test_parse_query_rejects_bad_date():
    with pytest.raises(ValidationError):
        parse_task_query({"startDate": "11/03/2026"})


# -------- list_tasks --------
def test_employee_only_sees_tasks_of_own_positions(service, seeded, employee_claim, fixed_now):
    listing = service.list_tasks(claim=employee_claim, query=TaskQuery(), now=fixed_now)

    assert {t.task_id for t in listing.tasks} == {"t-today", "t-yesterday", "t-done"}
    assert len(listing.positions) == 5


def test_foreign_position_filter_never_broadens(service, seeded, employee_claim, fixed_now):
    listing = service.list_tasks(claim=employee_claim, query=TaskQuery(position_id="pos-2"), now=fixed_now)

    assert all(t.position_id == "pos-1" for t in listing.tasks)


def test_pending_filter_includes_overdue_flagged_tasks(service, seeded, employee_claim, fixed_now):
    listing = service.list_tasks(
        claim=employee_claim, query=TaskQuery(status=TaskStatusFilter.PENDING), now=fixed_now
    )

    by_id = {t.task_id: t.to_dict(now=fixed_now) for t in listing.tasks}
    assert set(by_id) == {"t-today", "t-yesterday"}
    assert by_id["t-yesterday"]["overdue"] is True
    assert by_id["t-today"]["overdue"] is False


def test_overdue_filter_returns_only_overdue_tasks(service, seeded, employee_claim, fixed_now):
    listing = service.list_tasks(
        claim=employee_claim, query=TaskQuery(status=TaskStatusFilter.OVERDUE), now=fixed_now
    )

    assert [t.task_id for t in listing.tasks] == ["t-yesterday"]


def test_admin_filters_are_pushed_to_storage(service, seeded, tasks_repo, admin_claim, fixed_now):
    listing = service.list_tasks(
        claim=admin_claim, query=TaskQuery(status=TaskStatusFilter.OVERDUE), now=fixed_now
    )

    assert tasks_repo.filters_seen[-1].status == TaskStatus.PENDING
    assert [t.task_id for t in listing.tasks] == ["t-yesterday"]
    assert len(listing.users) == 4


def test_non_admin_users_are_colleagues_deduplicated(service, seeded, fixed_now):
    claim = Claim(user_id="sup-1", email="s@x", role=Role.SUPERVISOR, position_ids=("pos-1", "pos-2"))

    listing = service.list_tasks(claim=claim, query=TaskQuery(), now=fixed_now)

    assert sorted(u.user_id for u in listing.users) == ["emp-1", "emp-2", "sup-1"]


# -------- get_task --------
def test_get_task_forbidden_outside_positions(service, seeded, employee_claim):
    with pytest.raises(AuthorizationError):
        service.get_task(claim=employee_claim, task_id="t-other")


def test_get_task_missing(service, seeded, admin_claim):
    with pytest.raises(NotFoundError):
        service.get_task(claim=admin_claim, task_id="nope")


# -------- create_task --------
def test_create_task_requires_admin(service, employee_claim):
    with pytest.raises(AuthorizationError):
        service.create_task(claim=employee_claim, payload={})


def test_create_task_requires_all_fields(service, admin_claim):
    with pytest.raises(ValidationError):
        service.create_task(claim=admin_claim, payload={"title": "x", "description": "y"})


def test_create_task_is_pending(service, admin_claim):
    task = service.create_task(
        claim=admin_claim,
        payload={
            "title": "Revisar extintores",
            "description": "Comprobar presion",
            "dueDate": "2026-03-12T08:00:00",
            "positionId": "pos-2",
            "shift": "AFTERNOON",
        },
    )

    assert task.status == TaskStatus.PENDING
    assert task.shift == Shift.AFTERNOON
    assert task.due_date == datetime(2026, 3, 12, 8, 0)


def test_create_task_rejects_bad_shift(service, admin_claim):
    with pytest.raises(ValidationError):
        service.create_task(
            claim=admin_claim,
            payload={
                "title": "a",
                "description": "b",
                "dueDate": "2026-03-12T08:00:00",
                "positionId": "pos-2",
                "shift": "EVENING",
            },
        )


# -------- update_task --------
def test_employee_completes_on_time(service, seeded, tasks_repo, employee_claim, fixed_now):
    updated = service.update_task(
        claim=employee_claim, task_id="t-today", payload={"status": "COMPLETED"}, now=fixed_now
    )

    assert updated.status == TaskStatus.COMPLETED
    assert updated.completed_by_id == "emp-1"
    assert updated.completed_late is False


def test_employee_completes_late(service, seeded, employee_claim, fixed_now):
    updated = service.update_task(
        claim=employee_claim, task_id="t-yesterday", payload={"status": "COMPLETED"}, now=fixed_now
    )

    assert updated.completed_late is True


def test_employee_supplied_completer_is_ignored(service, seeded, employee_claim, fixed_now):
    updated = service.update_task(
        claim=employee_claim,
        task_id="t-today",
        payload={"status": "COMPLETED", "completedById": "emp-2"},
        now=fixed_now,
    )

    assert updated.completed_by_id == "emp-1"


def test_employee_payload_with_other_fields_is_rejected_whole(service, seeded, tasks_repo, employee_claim, fixed_now):
    with pytest.raises(AuthorizationError):
        service.update_task(
            claim=employee_claim,
            task_id="t-today",
            payload={"status": "COMPLETED", "title": "hacked"},
            now=fixed_now,
        )

    task = tasks_repo.get_by_id("t-today")
    assert task.status == TaskStatus.PENDING
    assert task.title == "Limpieza surtidores"


def test_employee_cannot_reopen(service, seeded, employee_claim, fixed_now):
    with pytest.raises(AuthorizationError):
        service.update_task(claim=employee_claim, task_id="t-done", payload={"status": "PENDING"}, now=fixed_now)


def test_empty_payload_is_forbidden(service, seeded, employee_claim, fixed_now):
    with pytest.raises(AuthorizationError):
        service.update_task(claim=employee_claim, task_id="t-today", payload={}, now=fixed_now)


def test_employee_cannot_touch_foreign_position(service, seeded, employee_claim, fixed_now):
    with pytest.raises(AuthorizationError):
        service.update_task(claim=employee_claim, task_id="t-other", payload={"status": "COMPLETED"}, now=fixed_now)


def test_completed_late_is_not_client_settable(service, seeded, admin_claim, fixed_now):
    with pytest.raises(AuthorizationError):
        service.update_task(claim=admin_claim, task_id="t-today", payload={"completedLate": True}, now=fixed_now)


def test_unrelated_admin_update_keeps_completed_late(service, tasks_repo, make_task, admin_claim, fixed_now):
    tasks_repo.add(make_task("late", status=TaskStatus.COMPLETED, completed_by_id="emp-1", completed_late=True))

    updated = service.update_task(claim=admin_claim, task_id="late", payload={"title": "Nuevo"}, now=fixed_now)

    assert updated.title == "Nuevo"
    assert updated.completed_late is True
    assert updated.completed_by_id == "emp-1"


def test_admin_may_name_completer(service, seeded, admin_claim, fixed_now):
    updated = service.update_task(
        claim=admin_claim,
        task_id="t-other",
        payload={"status": "COMPLETED", "completedById": "emp-2"},
        now=fixed_now,
    )

    assert updated.completed_by_id == "emp-2"


def test_admin_reopen_clears_completion(service, tasks_repo, make_task, admin_claim, fixed_now):
    tasks_repo.add(make_task("late", status=TaskStatus.COMPLETED, completed_by_id="emp-1", completed_late=True))

    updated = service.update_task(claim=admin_claim, task_id="late", payload={"status": "PENDING"}, now=fixed_now)

    assert updated.status == TaskStatus.PENDING
    assert updated.completed_by_id is None
    assert updated.completed_late is False


def test_update_missing_task(service, admin_claim, fixed_now):
    with pytest.raises(NotFoundError):
        service.update_task(claim=admin_claim, task_id="nope", payload={"title": "x"}, now=fixed_now)


# -------- duplicate_task --------
def test_admin_duplicates_completed_task_as_pending(service, seeded, admin_claim):
    copy = service.duplicate_task(
        claim=admin_claim, task_id="t-done", payload={"newDueDate": "2026-03-20T09:00:00"}
    )

    assert copy.task_id != "t-done"
    assert copy.status == TaskStatus.PENDING
    assert copy.completed_by_id is None
    assert copy.completed_late is False
    assert copy.title == "Limpieza surtidores"
    assert copy.position_id == "pos-1"
    assert copy.due_date == datetime(2026, 3, 20, 9, 0)


def test_duplicate_requires_due_date(service, seeded, admin_claim):
    with pytest.raises(ValidationError):
        service.duplicate_task(claim=admin_claim, task_id="t-done", payload={})


def test_duplicate_missing_source(service, admin_claim):
    with pytest.raises(NotFoundError):
        service.duplicate_task(claim=admin_claim, task_id="nope", payload={"newDueDate": "2026-03-20T09:00:00"})


def test_duplicate_admin_only(service, seeded, supervisor_claim):
    with pytest.raises(AuthorizationError):
        service.duplicate_task(claim=supervisor_claim, task_id="t-done", payload={"newDueDate": "2026-03-20"})


def test_admin_null_completer_defaults_to_actor(service, seeded, admin_claim, fixed_now):
    updated = service.update_task(
        claim=admin_claim,
        task_id="t-today",
        payload={"status": "COMPLETED", "completedById": None},
        now=fixed_now,
    )

    assert updated.status == TaskStatus.COMPLETED
    assert updated.completed_by_id == "admin-1"


def test_completer_on_pending_task_is_rejected(service, seeded, tasks_repo, admin_claim, fixed_now):
    with pytest.raises(ValidationError):
        service.update_task(
            claim=admin_claim, task_id="t-today", payload={"completedById": "admin-1"}, now=fixed_now
        )

    assert tasks_repo.get_by_id("t-today").completed_by_id is None


def test_completer_cannot_be_cleared_on_completed_task(service, seeded, admin_claim, fixed_now):
    with pytest.raises(ValidationError):
        service.update_task(claim=admin_claim, task_id="t-done", payload={"completedById": None}, now=fixed_now)


def test_completed_late_uses_due_date_from_same_payload(service, seeded, admin_claim, fixed_now):
    updated = service.update_task(
        claim=admin_claim,
        task_id="t-yesterday",
        payload={"status": "COMPLETED", "dueDate": "2026-03-12T09:00:00"},
        now=fixed_now,
    )

    assert updated.due_date == datetime(2026, 3, 12, 9, 0)
    assert updated.completed_late is False
