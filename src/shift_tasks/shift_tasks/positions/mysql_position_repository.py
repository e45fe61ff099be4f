from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Position
from .repository import PositionRepository


class MySQLPositionRepository(PositionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Position]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM positions ORDER BY id")
            return [Position(position_id=r["id"], name=r["name"]) for r in fetchall(cur)]

    def get_by_id(self, position_id: str) -> Optional[Position]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM positions WHERE id=%s", (position_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Position(position_id=r["id"], name=r["name"])
