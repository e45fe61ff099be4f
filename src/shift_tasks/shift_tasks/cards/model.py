from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import to_iso
from ..core.enums import CardType


@dataclass(frozen=True)
class CardRecord:
    """How many cards of one type an employee has placed at one position.

    At most one record exists per (user_id, position_id, card_type).
    """

    record_id: str
    user_id: str
    position_id: str
    card_type: CardType
    count: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "userId": self.user_id,
            "positionId": self.position_id,
            "cardType": self.card_type.value,
            "count": self.count,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
