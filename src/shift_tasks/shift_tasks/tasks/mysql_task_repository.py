from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..common.ids import new_id
from ..core.enums import Shift, TaskStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import UPDATABLE_COLUMNS, NewTask, Task, TaskFilters
from .repository import TaskRepository

_TASK_COLUMNS = (
    "id, title, description, status, dueDate, createdAt, updatedAt, "
    "positionId, shift, completedById, completedLate"
)


def _row_to_task(r: dict) -> Task:
    return Task(
        task_id=r["id"],
        title=r["title"],
        description=r["description"],
        status=TaskStatus(r["status"]),
        due_date=r["dueDate"],
        created_at=r["createdAt"],
        updated_at=r["updatedAt"],
        position_id=r["positionId"],
        shift=Shift(r["shift"]),
        completed_by_id=r.get("completedById"),
        completed_late=bool(r.get("completedLate") or 0),
    )


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def _now_ms() -> datetime:
    # DATETIME(3) keeps milliseconds only.
    now = now_local()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _insert(cur, new_task: NewTask) -> Task:
        task_id = new_id("task")
        now = _now_ms()
        cur.execute(
            """
            INSERT INTO tasks (
                id, title, description, status, dueDate, createdAt, updatedAt,
                positionId, shift, completedById, completedLate
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, NULL, 0)
            """,
            (
                task_id,
                new_task.title,
                new_task.description,
                TaskStatus.PENDING.value,
                new_task.due_date,
                now,
                now,
                new_task.position_id,
                new_task.shift.value,
            ),
        )
        return Task(
            task_id=task_id,
            title=new_task.title,
            description=new_task.description,
            status=TaskStatus.PENDING,
            due_date=new_task.due_date,
            created_at=now,
            updated_at=now,
            position_id=new_task.position_id,
            shift=new_task.shift,
        )

    @staticmethod
    def _select_one(cur, task_id: str) -> Optional[Task]:
        cur.execute(f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id=%s", (task_id,))
        r = fetchone(cur)
        return _row_to_task(r) if r else None

    def create(self, new_task: NewTask) -> Task:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert(cur, new_task)

    def get_by_id(self, task_id: str) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, task_id)

    def list_by_filters(self, filters: TaskFilters) -> Sequence[Task]:
        clauses = ["1=1"]
        params: list[object] = []

        if filters.position_id is not None:
            clauses.append("positionId=%s")
            params.append(filters.position_id)
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if filters.shift is not None:
            clauses.append("shift=%s")
            params.append(filters.shift.value)
        if filters.start_date is not None:
            clauses.append("dueDate >= %s")
            params.append(start_of_day(filters.start_date))
        if filters.end_date is not None:
            clauses.append("dueDate <= %s")
            params.append(end_of_day(filters.end_date))
        if filters.on_date is not None:
            clauses.append("dueDate BETWEEN %s AND %s")
            params.extend([start_of_day(filters.on_date), end_of_day(filters.on_date)])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE {where} ORDER BY dueDate, id",
                tuple(params),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[Task]:
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValidationError(f"Unsupported task fields: {', '.join(sorted(unknown))}")

        assignments = [f"{UPDATABLE_COLUMNS[k]}=%s" for k in changes]
        params = [_to_db(v) for v in changes.values()]
        assignments.append("updatedAt=%s")
        params.append(_now_ms())

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM tasks WHERE id=%s", (task_id,))
            if not fetchone(cur):
                return None

            cur.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE id=%s",
                tuple(params + [task_id]),
            )
            return self._select_one(cur, task_id)

    def duplicate(self, task_id: str, new_due_date: datetime) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            original = self._select_one(cur, task_id)
            if not original:
                return None
            return self._insert(
                cur,
                NewTask(
                    title=original.title,
                    description=original.description,
                    due_date=new_due_date,
                    position_id=original.position_id,
                    shift=original.shift,
                ),
            )
