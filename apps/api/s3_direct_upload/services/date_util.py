from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Protocol

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class DateUtil(Protocol):
    def format_datetime(self, value: datetime) -> str: ...

    def format_date(self, value: date) -> str: ...

    def format_expiration(self, value: datetime) -> str: ...


class UtcDateUtil:
    def format_datetime(self, value: datetime) -> str:
        # x-amz-date is pinned to midnight of the signing day.
        midnight = as_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight.strftime("%Y%m%dT%H%M%SZ")

    def format_date(self, value: date) -> str:
        if isinstance(value, datetime):
            value = as_utc(value).date()
        return value.strftime("%Y%m%d")

    def format_expiration(self, value: datetime) -> str:
        return as_utc(value).isoformat().replace("+00:00", "Z")


DEFAULT_DATE_UTIL = UtcDateUtil()
