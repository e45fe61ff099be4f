from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewUser, User, UserChanges


class UserRepository(Protocol):
    """Repository interface for users and their position assignments.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create(self, new_user: NewUser) -> User:
        raise NotImplementedError

    def update(self, user_id: str, changes: UserChanges) -> Optional[User]:
        raise NotImplementedError

    def delete(self, user_id: str) -> bool:
        raise NotImplementedError

    def list_by_position(self, position_id: str) -> Sequence[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError
