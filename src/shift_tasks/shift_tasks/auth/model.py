from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Claim:
    """Verified identity carried by a bearer token."""

    user_id: str
    email: str
    role: Role
    position_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "positionIds": list(self.position_ids),
        }
