from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization decisions."""

    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"
    EMPLOYEE = "EMPLOYEE"


class TaskStatus(str, Enum):
    """Stored task status. Overdue is derived, never persisted."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class TaskStatusFilter(str, Enum):
    """Status values accepted by task list queries."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class Shift(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    NIGHT = "NIGHT"


class CardType(str, Enum):
    """Loyalty card products counted per employee and position."""

    MOEVE_GOW_BANKINTER = "MOEVE_GOW_BANKINTER"
    MASTERCARD_MOEVE_GOW_BANKINTER = "MASTERCARD_MOEVE_GOW_BANKINTER"
    MOEVE_PRO = "MOEVE_PRO"
    MOEVE_GOW = "MOEVE_GOW"


class RankingPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
