from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..access import policy
from ..auth.model import Claim
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_datetime, require_enum, require_non_empty
from ..core.enums import Shift, TaskStatus, TaskStatusFilter
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..positions.model import Position
from ..positions.repository import PositionRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import NewTask, Task, TaskFilters, is_completed_late, is_overdue
from .repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskQuery:
    """List filters as sent by a client (status may be the OVERDUE pseudo-status)."""

    position_id: Optional[str] = None
    status: Optional[TaskStatusFilter] = None
    shift: Optional[Shift] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    on_date: Optional[date] = None

    def storage_filters(self, *, position_id: Optional[str]) -> TaskFilters:
        # OVERDUE is a post-filter over PENDING rows.
        status = None
        if self.status is not None:
            status = TaskStatus.PENDING if self.status == TaskStatusFilter.OVERDUE else TaskStatus(self.status.value)
        return TaskFilters(
            position_id=position_id,
            status=status,
            shift=self.shift,
            start_date=self.start_date,
            end_date=self.end_date,
            on_date=self.on_date,
        )


def parse_task_query(args: Mapping[str, str]) -> TaskQuery:
    """Build a TaskQuery from query-string arguments; blanks mean "no filter"."""

    def _get(name: str) -> Optional[str]:
        v = args.get(name)
        return v.strip() if v and v.strip() else None

    def _date(name: str) -> Optional[date]:
        v = _get(name)
        if v is None:
            return None
        try:
            return parse_iso_date(v)
        except ValueError:
            raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")

    status = _get("status")
    shift = _get("shift")
    return TaskQuery(
        position_id=_get("positionId"),
        status=require_enum(status, TaskStatusFilter, "status") if status else None,
        shift=require_enum(shift, Shift, "shift") if shift else None,
        start_date=_date("startDate"),
        end_date=_date("endDate"),
        on_date=_date("date"),
    )


@dataclass(frozen=True)
class TaskListing:
    tasks: list[Task]
    positions: Sequence[Position] = field(default_factory=list)
    users: Sequence[User] = field(default_factory=list)


class TaskService:
    """Use cases: list, read, create, update (complete) and duplicate tasks."""

    def __init__(self, tasks: TaskRepository, users: UserRepository, positions: PositionRepository):
        self._tasks = tasks
        self._users = users
        self._positions = positions

    # -------- reads --------
    def list_tasks(self, *, claim: Claim, query: TaskQuery, now: Optional[datetime] = None) -> TaskListing:
        now = now or now_local()

        if policy.is_admin(claim.role):
            tasks = list(self._tasks.list_by_filters(query.storage_filters(position_id=query.position_id)))
            users: Sequence[User] = self._users.list_all()
        else:
            # Position visibility first, then the caller's filters, all in memory.
            # A positionId outside the actor's assignment narrows nothing.
            visible = policy.filter_visible_tasks(self._tasks.list_by_filters(TaskFilters()), claim)
            position_id = query.position_id if query.position_id in claim.position_ids else None
            filters = query.storage_filters(position_id=position_id)
            tasks = [t for t in visible if filters.matches(t)]
            users = self._users_sharing_positions(claim.position_ids)

        if query.status == TaskStatusFilter.OVERDUE:
            tasks = [t for t in tasks if is_overdue(t, now)]

        return TaskListing(tasks=tasks, positions=self._positions.list_all(), users=users)

    def _users_sharing_positions(self, position_ids: Sequence[str]) -> list[User]:
        seen: dict[str, User] = {}
        for position_id in position_ids:
            for user in self._users.list_by_position(position_id):
                seen.setdefault(user.user_id, user)
        return list(seen.values())

    def _get_or_404(self, task_id: str) -> Task:
        task = self._tasks.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def get_task(self, *, claim: Claim, task_id: str) -> Task:
        task = self._get_or_404(task_id)
        if not policy.can_access_position(claim.position_ids, task.position_id, claim.role):
            raise AuthorizationError("Forbidden")
        return task

    # -------- writes --------
    def create_task(self, *, claim: Claim, payload: Mapping[str, Any]) -> Task:
        if not policy.can_create_task(claim.role):
            raise AuthorizationError("Forbidden - Admin access required")

        missing = [k for k in ("title", "description", "dueDate", "positionId", "shift") if not payload.get(k)]
        if missing:
            raise ValidationError("All fields are required")

        new_task = NewTask(
            title=require_non_empty(payload["title"], "title"),
            description=require_non_empty(payload["description"], "description"),
            due_date=require_datetime(payload["dueDate"], "dueDate"),
            position_id=require_non_empty(payload["positionId"], "positionId"),
            shift=require_enum(payload["shift"], Shift, "shift"),
        )
        task = self._tasks.create(new_task)
        logger.info("Task %s created by %s for %s/%s", task.task_id, claim.user_id, task.position_id, task.shift.value)
        return task

    @staticmethod
    def _coerce_update(payload: Mapping[str, Any]) -> dict[str, Any]:
        """JSON payload -> repository changes, validating each present field."""
        changes: dict[str, Any] = {}
        if "title" in payload:
            changes["title"] = require_non_empty(payload["title"], "title")
        if "description" in payload:
            changes["description"] = require_non_empty(payload["description"], "description")
        if "status" in payload:
            changes["status"] = require_enum(payload["status"], TaskStatus, "status")
        if "dueDate" in payload:
            changes["due_date"] = require_datetime(payload["dueDate"], "dueDate")
        if "positionId" in payload:
            changes["position_id"] = require_non_empty(payload["positionId"], "positionId")
        if "shift" in payload:
            changes["shift"] = require_enum(payload["shift"], Shift, "shift")
        if "completedById" in payload:
            v = payload["completedById"]
            changes["completed_by_id"] = require_non_empty(v, "completedById") if v is not None else None
        return changes

    def update_task(
        self,
        *,
        claim: Claim,
        task_id: str,
        payload: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> Task:
        now = now or now_local()
        task = self._get_or_404(task_id)

        if not policy.can_access_position(claim.position_ids, task.position_id, claim.role):
            raise AuthorizationError("Forbidden")

        rejected = policy.disallowed_fields(claim.role, "update_task", payload.keys())
        if rejected:
            raise AuthorizationError("Forbidden - Only admins can update task details")
        if not payload:
            raise AuthorizationError("Forbidden - Nothing to update")

        changes = self._coerce_update(payload)

        if not policy.can_update_task_details(claim.role):
            if not policy.can_mark_task_complete(task, claim):
                raise AuthorizationError("Forbidden")
            if changes.get("status") != TaskStatus.COMPLETED:
                raise AuthorizationError("Forbidden - Only completing a task is allowed")
            # The completer is always the actor here, whatever the client sent.
            changes.pop("completed_by_id", None)

        new_status = changes.get("status")
        if new_status == TaskStatus.COMPLETED and task.status == TaskStatus.PENDING:
            changes["completed_by_id"] = changes.get("completed_by_id") or claim.user_id
            changes["completed_late"] = is_completed_late(changes.get("due_date", task.due_date), now)
        elif new_status == TaskStatus.PENDING and task.status == TaskStatus.COMPLETED:
            changes["completed_by_id"] = None
            changes["completed_late"] = False
        elif "completed_by_id" in changes:
            # A completer exists exactly when the task is COMPLETED.
            resulting = new_status or task.status
            if resulting != TaskStatus.COMPLETED or changes["completed_by_id"] is None:
                raise ValidationError("completedById can only name the completer of a COMPLETED task")

        updated = self._tasks.update(task_id, changes)
        if not updated:
            raise NotFoundError("Task not found")

        if updated.status != task.status:
            logger.info(
                "Task %s %s -> %s by %s (late=%s)",
                task_id,
                task.status.value,
                updated.status.value,
                claim.user_id,
                updated.completed_late,
            )
        return updated

    def duplicate_task(self, *, claim: Claim, task_id: str, payload: Mapping[str, Any]) -> Task:
        if not policy.can_duplicate_task(claim.role):
            raise AuthorizationError("Forbidden - Admin access required")

        if not payload.get("newDueDate"):
            raise ValidationError("New due date is required")
        new_due_date = require_datetime(payload["newDueDate"], "newDueDate")

        copy = self._tasks.duplicate(task_id, new_due_date)
        if not copy:
            raise NotFoundError("Task not found")
        logger.info("Task %s duplicated as %s by %s", task_id, copy.task_id, claim.user_id)
        return copy
