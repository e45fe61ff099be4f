from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any, Callable, Optional

import pytest

from src.shift_tasks.shift_tasks.auth.model import Claim
from src.shift_tasks.shift_tasks.cards.model import CardRecord
from src.shift_tasks.shift_tasks.core.constants import DEFAULT_POSITIONS
from src.shift_tasks.shift_tasks.core.enums import Role, Shift, TaskStatus
from src.shift_tasks.shift_tasks.core.exceptions import AlreadyExistsError, ValidationError
from src.shift_tasks.shift_tasks.positions.model import Position
from src.shift_tasks.shift_tasks.tasks.model import UPDATABLE_COLUMNS, NewTask, Task, TaskFilters
from src.shift_tasks.shift_tasks.users.model import NewUser, User, UserChanges

CREATED_AT = datetime(2026, 3, 1, 8, 0, 0)


# ---------------------------------------------------------------------------
# In-memory repositories
# ---------------------------------------------------------------------------


class InMemoryPositions:
    def __init__(self, positions=DEFAULT_POSITIONS):
        self.positions = [Position(position_id=pid, name=name) for pid, name in positions]

    def list_all(self):
        return list(self.positions)

    def get_by_id(self, position_id):
        return next((p for p in self.positions if p.position_id == position_id), None)


class InMemoryUsers:
    def __init__(self, users=()):
        self.users: dict[str, User] = {u.user_id: u for u in users}
        self._seq = 0

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create(self, new_user: NewUser) -> User:
        if self.get_by_email(new_user.email):
            raise AlreadyExistsError("Record already exists")
        self._seq += 1
        user = User(
            user_id=f"user-{self._seq}",
            name=new_user.name,
            email=new_user.email,
            password_hash=new_user.password_hash,
            role=new_user.role,
            position_ids=tuple(dict.fromkeys(new_user.position_ids)),
        )
        return self.add(user)

    def update(self, user_id, changes: UserChanges) -> Optional[User]:
        user = self.users.get(user_id)
        if not user:
            return None
        fields = {
            "name": changes.name,
            "email": changes.email,
            "role": changes.role,
            "password_hash": changes.password_hash,
            "position_ids": tuple(dict.fromkeys(changes.position_ids)) if changes.position_ids is not None else None,
        }
        return self.add(dataclasses.replace(user, **{k: v for k, v in fields.items() if v is not None}))

    def delete(self, user_id):
        return self.users.pop(user_id, None) is not None

    def list_by_position(self, position_id):
        return sorted((u for u in self.users.values() if position_id in u.position_ids), key=lambda u: u.name)

    def list_all(self):
        return sorted(self.users.values(), key=lambda u: u.name)


class InMemoryTasks:
    def __init__(self, tasks=()):
        self.tasks: dict[str, Task] = {t.task_id: t for t in tasks}
        self._seq = 0
        self.filters_seen: list[TaskFilters] = []

    def add(self, task: Task) -> Task:
        self.tasks[task.task_id] = task
        return task

    def create(self, new_task: NewTask) -> Task:
        self._seq += 1
        return self.add(
            Task(
                task_id=f"task-new-{self._seq}",
                title=new_task.title,
                description=new_task.description,
                status=TaskStatus.PENDING,
                due_date=new_task.due_date,
                created_at=CREATED_AT,
                updated_at=CREATED_AT,
                position_id=new_task.position_id,
                shift=new_task.shift,
            )
        )

    def get_by_id(self, task_id):
        return self.tasks.get(task_id)

    def list_by_filters(self, filters: TaskFilters):
        self.filters_seen.append(filters)
        found = [t for t in self.tasks.values() if filters.matches(t)]
        return sorted(found, key=lambda t: (t.due_date, t.task_id))

    def update(self, task_id, changes):
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValidationError("Unsupported task fields")
        task = self.tasks.get(task_id)
        if not task:
            return None
        return self.add(dataclasses.replace(task, updated_at=datetime(2026, 3, 11, 12, 0), **changes))

    def duplicate(self, task_id, new_due_date):
        original = self.tasks.get(task_id)
        if not original:
            return None
        return self.create(
            NewTask(
                title=original.title,
                description=original.description,
                due_date=new_due_date,
                position_id=original.position_id,
                shift=original.shift,
            )
        )


class InMemoryCards:
    def __init__(self):
        self.records: dict[tuple, CardRecord] = {}

    def upsert(self, *, user_id, position_id, card_type, count):
        key = (user_id, position_id, card_type)
        existing = self.records.get(key)
        self.records[key] = CardRecord(
            record_id=existing.record_id if existing else f"card-{len(self.records) + 1}",
            user_id=user_id,
            position_id=position_id,
            card_type=card_type,
            count=count,
            created_at=existing.created_at if existing else CREATED_AT,
            updated_at=datetime(2026, 3, 11, 12, 0),
        )
        return self.records[key]

    def list_by_filters(self, *, position_id=None, user_id=None):
        return [
            r
            for r in self.records.values()
            if (position_id is None or r.position_id == position_id) and (user_id is None or r.user_id == user_id)
        ]


# ---------------------------------------------------------------------------
# Scripted MySQL connection for repository SQL tests
# ---------------------------------------------------------------------------


def _normalize(sql: str) -> str:
    return " ".join(sql.split())


class ScriptedCursor:
    def __init__(self, db: "ScriptedDB"):
        self._db = db
        self._rows: list = []
        self.rowcount = 0

    def execute(self, sql, params=()):
        stmt = _normalize(sql)
        self._db.executed.append((stmt, tuple(params or ())))
        for needle, exc in self._db.failures:
            if needle in stmt:
                raise exc
        self._rows = []
        self.rowcount = self._db.rowcount
        for needle, rows in self._db.results:
            if needle in stmt:
                self._rows = list(rows(params) if callable(rows) else rows)
                break

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class ScriptedConnection:
    def __init__(self, db: "ScriptedDB"):
        self._db = db

    def cursor(self, dictionary=False):
        return ScriptedCursor(self._db)

    def commit(self):
        self._db.commits += 1

    def rollback(self):
        self._db.rollbacks += 1

    def close(self):
        self._db.closed += 1


class ScriptedDB:
    """Stands in for DatabaseConnection: records statements, answers by substring."""

    def __init__(self):
        self.executed: list[tuple[str, tuple]] = []
        self.results: list[tuple[str, Any]] = []
        self.failures: list[tuple[str, Exception]] = []
        self.rowcount = 1
        self.commits = 0
        self.rollbacks = 0
        self.closed = 0

    def on(self, needle: str, rows) -> "ScriptedDB":
        self.results.append((needle, rows))
        return self

    def fail(self, needle: str, exc: Exception) -> "ScriptedDB":
        self.failures.append((needle, exc))
        return self

    def connect(self, *, with_database: bool = True):
        return ScriptedConnection(self)

    def statements(self, needle: str = "") -> list[tuple[str, tuple]]:
        return [(s, p) for s, p in self.executed if needle in s]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday; the ISO week started on Monday 2026-03-09.
    return datetime(2026, 3, 11, 10, 0, 0)


@pytest.fixture
def admin_claim() -> Claim:
    return Claim(user_id="admin-1", email="admin@taskmang.com", role=Role.ADMIN, position_ids=("pos-4",))


@pytest.fixture
def supervisor_claim() -> Claim:
    return Claim(user_id="sup-1", email="sup@example.com", role=Role.SUPERVISOR, position_ids=("pos-1",))


@pytest.fixture
def employee_claim() -> Claim:
    return Claim(user_id="emp-1", email="emp@example.com", role=Role.EMPLOYEE, position_ids=("pos-1",))


@pytest.fixture
def make_task() -> Callable[..., Task]:
    def _make(task_id="task-1", **overrides) -> Task:
        fields = dict(
            task_id=task_id,
            title="Limpieza surtidores",
            description="Limpiar los surtidores de la isla 1",
            status=TaskStatus.PENDING,
            due_date=datetime(2026, 3, 11, 9, 0),
            created_at=CREATED_AT,
            updated_at=CREATED_AT,
            position_id="pos-1",
            shift=Shift.MORNING,
        )
        fields.update(overrides)
        return Task(**fields)

    return _make


@pytest.fixture
def make_user() -> Callable[..., User]:
    def _make(user_id, name, role=Role.EMPLOYEE, position_ids=("pos-1",), **overrides) -> User:
        fields = dict(
            user_id=user_id,
            name=name,
            email=f"{user_id}@example.com",
            password_hash="hash",
            role=role,
            position_ids=tuple(position_ids),
        )
        fields.update(overrides)
        return User(**fields)

    return _make


@pytest.fixture
def positions_repo() -> InMemoryPositions:
    return InMemoryPositions()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def tasks_repo() -> InMemoryTasks:
    return InMemoryTasks()


@pytest.fixture
def cards_repo() -> InMemoryCards:
    return InMemoryCards()


@pytest.fixture
def scripted_db() -> ScriptedDB:
    return ScriptedDB()
