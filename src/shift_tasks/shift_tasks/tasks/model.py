from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import end_of_day, start_of_day, to_iso
from ..core.enums import Shift, TaskStatus


@dataclass(frozen=True)
class Task:
    """Domain entity: a recurring duty for one position and shift."""

    task_id: str
    title: str
    description: str
    status: TaskStatus
    due_date: datetime
    created_at: datetime
    updated_at: datetime
    position_id: str
    shift: Shift
    completed_by_id: Optional[str] = None
    completed_late: bool = False

    def to_dict(self, *, now: datetime) -> dict:
        return {
            "id": self.task_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "dueDate": to_iso(self.due_date),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
            "positionId": self.position_id,
            "shift": self.shift.value,
            "completedById": self.completed_by_id,
            "completedLate": bool(self.completed_late),
            "overdue": is_overdue(self, now),
        }


@dataclass(frozen=True)
class NewTask:
    title: str
    description: str
    due_date: datetime
    position_id: str
    shift: Shift


# Columns `TaskRepository.update` accepts (attribute name -> column name).
UPDATABLE_COLUMNS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "due_date": "dueDate",
    "position_id": "positionId",
    "shift": "shift",
    "completed_by_id": "completedById",
    "completed_late": "completedLate",
}


@dataclass(frozen=True)
class TaskFilters:
    """Storage-level filters; `status` is the stored enum only."""

    position_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    shift: Optional[Shift] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    on_date: Optional[date] = None

    def matches(self, task: Task) -> bool:
        """In-memory twin of the SQL WHERE clause built by the MySQL repository."""
        if self.position_id is not None and task.position_id != self.position_id:
            return False
        if self.status is not None and task.status != self.status:
            return False
        if self.shift is not None and task.shift != self.shift:
            return False
        if self.start_date is not None and task.due_date < start_of_day(self.start_date):
            return False
        if self.end_date is not None and task.due_date > end_of_day(self.end_date):
            return False
        if self.on_date is not None and task.due_date.date() != self.on_date:
            return False
        return True


def is_overdue(task: Task, now: datetime) -> bool:
    """Derived view-time condition; flips once, when the due day ends."""
    return task.status == TaskStatus.PENDING and now > end_of_day(task.due_date)


def is_completed_late(due_date: datetime, now: datetime) -> bool:
    return now > end_of_day(due_date)
