from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object. `password_hash` never leaves the service layer; use
    `to_public_dict()` for anything sent to a client.
    """

    user_id: str
    name: str
    email: str
    password_hash: str
    role: Role
    position_ids: tuple[str, ...] = ()

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "positionIds": list(self.position_ids),
        }


@dataclass(frozen=True)
class NewUser:
    name: str
    email: str
    password_hash: str
    role: Role
    position_ids: tuple[str, ...]


@dataclass(frozen=True)
class UserChanges:
    """Partial update; None means "leave unchanged".

    `position_ids`, when given, replaces the whole assignment set.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None
    position_ids: Optional[tuple[str, ...]] = None
    password_hash: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.name, self.email, self.role, self.position_ids, self.password_hash)
        )
