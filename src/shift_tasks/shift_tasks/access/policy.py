"""Access policy: who may see and change what.

Every rule is a pure function of the actor's role/claim and the target. Nothing
here raises or touches storage; services turn a False (or an empty result) into
AuthorizationError.

Task visibility is deliberately asymmetric: SUPERVISOR has broader *action*
rights (completing any visible task, recording cards) but sees tasks exactly
like EMPLOYEE, i.e. only those of its assigned positions. Only ADMIN bypasses
the position filter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, TypeVar

from ..core.enums import Role

if TYPE_CHECKING:
    from ..auth.model import Claim
    from ..tasks.model import Task

T = TypeVar("T", bound="Task")


def is_admin(role: Role) -> bool:
    return role == Role.ADMIN


def is_supervisor_or_admin(role: Role) -> bool:
    return role in (Role.ADMIN, Role.SUPERVISOR)


def can_access_position(user_position_ids: Iterable[str], target_position_id: str, role: Role) -> bool:
    if is_admin(role):
        return True
    return target_position_id in set(user_position_ids)


def filter_visible_tasks(tasks: Iterable[T], claim: "Claim") -> list[T]:
    if is_admin(claim.role):
        return list(tasks)
    allowed = set(claim.position_ids)
    return [t for t in tasks if t.position_id in allowed]


def can_create_task(role: Role) -> bool:
    return is_admin(role)


def can_update_task_details(role: Role) -> bool:
    return is_admin(role)


def can_duplicate_task(role: Role) -> bool:
    return is_admin(role)


def can_mark_task_complete(task: "Task", claim: "Claim") -> bool:
    if is_supervisor_or_admin(claim.role):
        return True
    return task.position_id in set(claim.position_ids)


def can_create_card_record(role: Role) -> bool:
    return is_supervisor_or_admin(role)


def can_view_all_users(role: Role) -> bool:
    return is_admin(role)


def can_manage_users(role: Role) -> bool:
    return is_admin(role)


def can_view_ranking(role: Role) -> bool:
    # Any authenticated role.
    return isinstance(role, Role)


# Payload fields (JSON names) each role may send per operation. Anything outside
# the set rejects the whole payload.
_TASK_DETAIL_FIELDS = frozenset(
    {"title", "description", "status", "dueDate", "positionId", "shift", "completedById"}
)
_TASK_COMPLETION_FIELDS = frozenset({"status", "completedById"})
_USER_ADMIN_FIELDS = frozenset({"name", "email", "role", "positionIds", "password"})

FIELD_ALLOW_LIST: dict[tuple[Role, str], frozenset[str]] = {
    (Role.ADMIN, "update_task"): _TASK_DETAIL_FIELDS,
    (Role.SUPERVISOR, "update_task"): _TASK_COMPLETION_FIELDS,
    (Role.EMPLOYEE, "update_task"): _TASK_COMPLETION_FIELDS,
    (Role.ADMIN, "update_user"): _USER_ADMIN_FIELDS,
}


def allowed_fields(role: Role, operation: str) -> frozenset[str]:
    return FIELD_ALLOW_LIST.get((role, operation), frozenset())


def disallowed_fields(role: Role, operation: str, payload_keys: Iterable[str]) -> set[str]:
    return set(payload_keys) - allowed_fields(role, operation)
