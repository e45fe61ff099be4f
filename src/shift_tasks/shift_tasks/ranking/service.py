from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..access import policy
from ..auth.model import Claim
from ..common.datetime_utils import now_local, period_start
from ..core.constants import DEFAULT_RANKING_PERIOD
from ..core.enums import RankingPeriod, Role, TaskStatus
from ..core.exceptions import AuthorizationError, ValidationError
from ..positions.repository import PositionRepository
from ..tasks.model import TaskFilters, is_overdue
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository


def parse_period(value: Any) -> RankingPeriod:
    """Query-string period; blank means the default (week)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return RankingPeriod(DEFAULT_RANKING_PERIOD)
    try:
        return RankingPeriod(value.strip() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError("Invalid period. Must be day, week, or month")


@dataclass(frozen=True)
class RankingRow:
    user_id: str
    name: str
    positions: Sequence[str]
    role: Role
    tasks_completed: int
    total_tasks: int

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "positions": list(self.positions),
            "role": self.role.value,
            "tasksCompleted": self.tasks_completed,
            "totalTasks": self.total_tasks,
        }


@dataclass(frozen=True)
class PositionSummary:
    position_id: str
    position_name: str
    pending: int = 0
    overdue: int = 0
    completed: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.overdue + self.completed

    def to_dict(self) -> dict:
        return {
            "positionId": self.position_id,
            "positionName": self.position_name,
            "pending": self.pending,
            "overdue": self.overdue,
            "completed": self.completed,
            "total": self.total,
        }


class RankingService:
    """Read-only reporting: employee ranking and per-position task counts."""

    def __init__(self, tasks: TaskRepository, users: UserRepository, positions: PositionRepository):
        self._tasks = tasks
        self._users = users
        self._positions = positions

    def ranking(
        self,
        *,
        claim: Claim,
        period: RankingPeriod,
        now: Optional[datetime] = None,
    ) -> list[RankingRow]:
        """Tasks completed per non-admin user since the start of `period`.

        Counts tasks whose completer is the user and whose due date falls on or
        after the period start. `total_tasks` is the number of joined rows, so a
        user without matches still reports 1.
        """
        if not policy.can_view_ranking(claim.role):
            raise AuthorizationError("Forbidden")

        start = period_start(period, now or now_local())
        recent = [
            t
            for t in self._tasks.list_by_filters(TaskFilters(start_date=start.date()))
            if t.status == TaskStatus.COMPLETED and t.completed_by_id and t.due_date >= start
        ]
        position_names = {p.position_id: p.name for p in self._positions.list_all()}

        rows = []
        for user in self._users.list_all():
            if user.role == Role.ADMIN:
                continue
            completed = sum(1 for t in recent if t.completed_by_id == user.user_id)
            rows.append(
                RankingRow(
                    user_id=user.user_id,
                    name=user.name,
                    positions=[position_names.get(p, p) for p in user.position_ids],
                    role=user.role,
                    tasks_completed=completed,
                    total_tasks=completed or 1,
                )
            )

        # Stable sort keeps the repository's name order among ties.
        rows.sort(key=lambda r: r.tasks_completed, reverse=True)
        return rows

    def position_summary(self, *, claim: Claim, now: Optional[datetime] = None) -> list[PositionSummary]:
        now = now or now_local()
        visible = policy.filter_visible_tasks(self._tasks.list_by_filters(TaskFilters()), claim)

        counts: dict[str, dict[str, int]] = {}
        for task in visible:
            bucket = counts.setdefault(task.position_id, {"pending": 0, "overdue": 0, "completed": 0})
            if task.status == TaskStatus.COMPLETED:
                bucket["completed"] += 1
            elif is_overdue(task, now):
                bucket["overdue"] += 1
            else:
                bucket["pending"] += 1

        summary = []
        for position in self._positions.list_all():
            if not policy.can_access_position(claim.position_ids, position.position_id, claim.role):
                continue
            summary.append(
                PositionSummary(
                    position_id=position.position_id,
                    position_name=position.name,
                    **counts.get(position.position_id, {}),
                )
            )
        return summary
