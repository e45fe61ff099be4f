from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import NewTask, Task, TaskFilters


class TaskRepository(Protocol):
    """Repository interface for tasks.

    `update` applies exactly the keys given in `changes` (see
    `model.UPDATABLE_COLUMNS`) and always refreshes `updated_at`. Role-based
    restrictions are the service's job, not the repository's.
    """

    def create(self, new_task: NewTask) -> Task:
        raise NotImplementedError

    def get_by_id(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def list_by_filters(self, filters: TaskFilters) -> Sequence[Task]:
        raise NotImplementedError

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[Task]:
        raise NotImplementedError

    def duplicate(self, task_id: str, new_due_date: datetime) -> Optional[Task]:
        raise NotImplementedError
