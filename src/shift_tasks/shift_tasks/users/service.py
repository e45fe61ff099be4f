from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from werkzeug.security import generate_password_hash

from ..access import policy
from ..auth.model import Claim
from ..common.validators import require_enum, require_id_list, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..positions.model import Position
from ..positions.repository import PositionRepository
from .model import NewUser, User, UserChanges
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserDirectory:
    users: Sequence[User]
    positions: Sequence[Position]


class UserService:
    """Use case: manage employee accounts and their position assignments (admin)."""

    def __init__(self, users: UserRepository, positions: PositionRepository):
        self._users = users
        self._positions = positions

    def list_users(self, *, claim: Claim) -> UserDirectory:
        if not policy.can_view_all_users(claim.role):
            raise AuthorizationError("Forbidden - Admin access required")
        return UserDirectory(users=self._users.list_all(), positions=self._positions.list_all())

    def list_positions(self) -> Sequence[Position]:
        return self._positions.list_all()

    def create_user(self, *, claim: Claim, payload: Mapping[str, Any]) -> User:
        if not policy.can_manage_users(claim.role):
            raise AuthorizationError("Forbidden - Admin access required")

        if any(not payload.get(k) for k in ("name", "email", "password", "role", "positionIds")):
            raise ValidationError("All fields are required and positionIds must be a non-empty array")

        new_user = NewUser(
            name=require_non_empty(payload["name"], "name"),
            email=require_non_empty(payload["email"], "email").lower(),
            password_hash=generate_password_hash(
                require_min_length(payload["password"], "password", MIN_PASSWORD_LENGTH)
            ),
            role=require_enum(payload["role"], Role, "role"),
            position_ids=require_id_list(payload["positionIds"], "positionIds"),
        )
        user = self._users.create(new_user)
        logger.info("User %s (%s) created by %s", user.user_id, user.role.value, claim.user_id)
        return user

    def update_user(self, *, claim: Claim, user_id: str, payload: Mapping[str, Any]) -> User:
        if not policy.can_manage_users(claim.role):
            raise AuthorizationError("Forbidden")

        if policy.disallowed_fields(claim.role, "update_user", payload.keys()):
            raise ValidationError("Invalid request body")

        changes = UserChanges(
            name=require_non_empty(payload["name"], "name") if "name" in payload else None,
            email=require_non_empty(payload["email"], "email").lower() if "email" in payload else None,
            role=require_enum(payload["role"], Role, "role") if "role" in payload else None,
            position_ids=(
                require_id_list(payload["positionIds"], "positionIds")
                if "positionIds" in payload
                else None
            ),
            password_hash=(
                generate_password_hash(require_min_length(payload["password"], "password", MIN_PASSWORD_LENGTH))
                if "password" in payload
                else None
            ),
        )
        if changes.is_empty():
            raise ValidationError("Invalid request body")

        user = self._users.update(user_id, changes)
        if not user:
            raise NotFoundError("User not found")
        logger.info("User %s updated by %s", user_id, claim.user_id)
        return user

    def delete_user(self, *, claim: Claim, user_id: str) -> None:
        if not policy.can_manage_users(claim.role):
            raise AuthorizationError("Forbidden")

        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")
        if user_id == claim.user_id:
            raise ValidationError("Cannot delete your own account")

        if not self._users.delete(user_id):
            raise NotFoundError("User not found")
        logger.info("User %s deleted by %s", user_id, claim.user_id)
