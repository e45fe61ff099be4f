from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..common.ids import new_id
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import NewUser, User, UserChanges
from .repository import UserRepository

_USER_COLUMNS = "u.id, u.name, u.email, u.password, u.role"


def _row_to_user(row: dict, position_ids: Iterable[str]) -> User:
    return User(
        user_id=row["id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password"],
        role=Role(row["role"]),
        position_ids=tuple(position_ids),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _position_ids_for(cur, user_ids: Sequence[str]) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {uid: [] for uid in user_ids}
        if not user_ids:
            return out
        cur.execute(
            f"""
            SELECT userId, positionId
            FROM user_positions
            WHERE userId IN ({placeholders(len(user_ids))})
            ORDER BY positionId
            """,
            tuple(user_ids),
        )
        for r in fetchall(cur):
            out.setdefault(r["userId"], []).append(r["positionId"])
        return out

    def _hydrate(self, cur, rows: Sequence[dict]) -> list[User]:
        by_user = self._position_ids_for(cur, [r["id"] for r in rows])
        return [_row_to_user(r, by_user.get(r["id"], [])) for r in rows]

    def _get_one(self, cur, where: str, value: str) -> Optional[User]:
        cur.execute(f"SELECT {_USER_COLUMNS} FROM users u WHERE {where}=%s", (value,))
        row = fetchone(cur)
        if not row:
            return None
        return self._hydrate(cur, [row])[0]

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get_one(cur, "u.id", user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get_one(cur, "u.email", email)

    @staticmethod
    def _insert_positions(cur, user_id: str, position_ids: Iterable[str]) -> None:
        for position_id in position_ids:
            cur.execute(
                "INSERT INTO user_positions (userId, positionId) VALUES (%s, %s)",
                (user_id, position_id),
            )

    def create(self, new_user: NewUser) -> User:
        user_id = new_id("user")
        position_ids = tuple(dict.fromkeys(new_user.position_ids))

        # User row and join rows commit together or not at all.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users (id, name, email, password, role)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (user_id, new_user.name, new_user.email, new_user.password_hash, new_user.role.value),
            )
            self._insert_positions(cur, user_id, position_ids)

        return User(
            user_id=user_id,
            name=new_user.name,
            email=new_user.email,
            password_hash=new_user.password_hash,
            role=new_user.role,
            position_ids=position_ids,
        )

    def update(self, user_id: str, changes: UserChanges) -> Optional[User]:
        assignments: list[str] = []
        params: list[object] = []
        if changes.name is not None:
            assignments.append("name=%s")
            params.append(changes.name)
        if changes.email is not None:
            assignments.append("email=%s")
            params.append(changes.email)
        if changes.role is not None:
            assignments.append("role=%s")
            params.append(changes.role.value)
        if changes.password_hash is not None:
            assignments.append("password=%s")
            params.append(changes.password_hash)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM users WHERE id=%s", (user_id,))
            if not fetchone(cur):
                return None

            if assignments:
                cur.execute(
                    f"UPDATE users SET {', '.join(assignments)} WHERE id=%s",
                    tuple(params + [user_id]),
                )

            if changes.position_ids is not None:
                # Replace, not merge.
                cur.execute("DELETE FROM user_positions WHERE userId=%s", (user_id,))
                self._insert_positions(cur, user_id, dict.fromkeys(changes.position_ids))

            return self._get_one(cur, "u.id", user_id)

    def delete(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0

    def list_by_position(self, position_id: str) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                JOIN user_positions up ON up.userId = u.id
                WHERE up.positionId=%s
                ORDER BY u.name
                """,
                (position_id,),
            )
            return self._hydrate(cur, fetchall(cur))

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users u ORDER BY u.name")
            return self._hydrate(cur, fetchall(cur))
