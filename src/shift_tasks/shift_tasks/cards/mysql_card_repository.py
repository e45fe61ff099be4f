from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.ids import new_id
from ..core.enums import CardType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CardRecord
from .repository import CardRecordRepository

_CARD_COLUMNS = "id, userId, positionId, cardType, `count`, createdAt, updatedAt"


def _row_to_record(r: dict) -> CardRecord:
    return CardRecord(
        record_id=r["id"],
        user_id=r["userId"],
        position_id=r["positionId"],
        card_type=CardType(r["cardType"]),
        count=int(r["count"]),
        created_at=r["createdAt"],
        updated_at=r["updatedAt"],
    )


class MySQLCardRecordRepository(CardRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, *, user_id: str, position_id: str, card_type: CardType, count: int) -> CardRecord:
        now = now_local()
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)

        # Lookup-then-write inside one transaction; count is overwritten, not added.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CARD_COLUMNS}
                FROM card_records
                WHERE userId=%s AND positionId=%s AND cardType=%s
                """,
                (user_id, position_id, card_type.value),
            )
            existing = fetchone(cur)

            if existing:
                cur.execute(
                    "UPDATE card_records SET `count`=%s, updatedAt=%s WHERE id=%s",
                    (int(count), now, existing["id"]),
                )
                return CardRecord(
                    record_id=existing["id"],
                    user_id=user_id,
                    position_id=position_id,
                    card_type=card_type,
                    count=int(count),
                    created_at=existing["createdAt"],
                    updated_at=now,
                )

            record_id = new_id("card")
            cur.execute(
                """
                INSERT INTO card_records (id, userId, positionId, cardType, `count`, createdAt, updatedAt)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (record_id, user_id, position_id, card_type.value, int(count), now, now),
            )
            return CardRecord(
                record_id=record_id,
                user_id=user_id,
                position_id=position_id,
                card_type=card_type,
                count=int(count),
                created_at=now,
                updated_at=now,
            )

    def list_by_filters(
        self,
        *,
        position_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[CardRecord]:
        clauses = ["1=1"]
        params: list[object] = []
        if position_id is not None:
            clauses.append("positionId=%s")
            params.append(position_id)
        if user_id is not None:
            clauses.append("userId=%s")
            params.append(user_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CARD_COLUMNS}
                FROM card_records
                WHERE {' AND '.join(clauses)}
                ORDER BY positionId, userId, cardType
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
