from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..access import policy
from ..auth.model import Claim
from ..common.validators import require_count, require_enum, require_non_empty
from ..core.enums import CardType
from ..core.exceptions import AuthorizationError, ValidationError
from ..positions.model import Position
from ..positions.repository import PositionRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import CardRecord
from .repository import CardRecordRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardBoard:
    records: Sequence[CardRecord]
    positions: Sequence[Position]
    users: Sequence[User]


class CardService:
    """Use case: loyalty-card counters per employee, position and card type."""

    def __init__(self, cards: CardRecordRepository, users: UserRepository, positions: PositionRepository):
        self._cards = cards
        self._users = users
        self._positions = positions

    def list_records(
        self,
        *,
        claim: Claim,
        position_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> CardBoard:
        users = self._users.list_by_position(position_id) if position_id else self._users.list_all()
        return CardBoard(
            records=self._cards.list_by_filters(position_id=position_id, user_id=user_id),
            positions=self._positions.list_all(),
            users=users,
        )

    def record_count(self, *, claim: Claim, payload: Mapping[str, Any]) -> CardRecord:
        if not policy.can_create_card_record(claim.role):
            raise AuthorizationError("Forbidden")

        if not payload.get("userId") or not payload.get("positionId") or not payload.get("cardType"):
            raise ValidationError("Invalid payload")

        record = self._cards.upsert(
            user_id=require_non_empty(payload["userId"], "userId"),
            position_id=require_non_empty(payload["positionId"], "positionId"),
            card_type=require_enum(payload["cardType"], CardType, "cardType"),
            count=require_count(payload.get("count"), "count"),
        )
        logger.info(
            "Card count %s=%d for %s at %s set by %s",
            record.card_type.value,
            record.count,
            record.user_id,
            record.position_id,
            claim.user_id,
        )
        return record
