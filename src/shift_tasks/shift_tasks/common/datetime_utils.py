from __future__ import annotations

from datetime import date, datetime, time, timedelta

from ..core.enums import RankingPeriod

END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (a trailing time part is ignored)."""
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into a naive local datetime.

    Clients send `toISOString()` values (UTC, trailing 'Z'); aware values are
    converted to local time so day boundaries match the station's calendar.
    """
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    parsed = datetime.fromisoformat(v)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(value: date | datetime) -> datetime:
    d = value.date() if isinstance(value, datetime) else value
    return datetime.combine(d, time.min)


def end_of_day(value: date | datetime) -> datetime:
    """23:59:59.999 of the calendar day of `value`."""
    d = value.date() if isinstance(value, datetime) else value
    return datetime.combine(d, END_OF_DAY)


def period_start(period: RankingPeriod, now: datetime) -> datetime:
    """Start of the current day, ISO week (Monday) or calendar month."""
    today = now.date()
    if period == RankingPeriod.DAY:
        return start_of_day(today)
    if period == RankingPeriod.WEEK:
        return start_of_day(today - timedelta(days=today.weekday()))
    return start_of_day(today.replace(day=1))


def to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds")
