from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CardType
from .model import CardRecord


class CardRecordRepository(Protocol):
    def upsert(self, *, user_id: str, position_id: str, card_type: CardType, count: int) -> CardRecord:
        """Create the record for the triple, or overwrite its count."""
        raise NotImplementedError

    def list_by_filters(
        self,
        *,
        position_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[CardRecord]:
        raise NotImplementedError
