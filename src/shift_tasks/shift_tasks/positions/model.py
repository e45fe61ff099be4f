from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Domain entity: a work site/station tasks and users are attached to."""

    position_id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.position_id, "name": self.name}
