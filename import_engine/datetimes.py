"""
import_engine.datetimes - Date / timestamp parsing shared by the
validators, the news date filter and the news store.

Naive timestamps are market wall-clock time (config.MARKET_UTC_OFFSET).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import config

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

MIN_DATE = date(1900, 1, 1)
MIN_INSTANT = datetime(1900, 1, 1, tzinfo=timezone.utc)


def market_tz() -> timezone:
    return timezone(timedelta(hours=config.MARKET_UTC_OFFSET))


def has_date_shape(value: str | None) -> bool:
    """True for YYYY-MM-DD digits, regardless of calendar validity."""
    return bool(value) and _DATE_RE.fullmatch(value) is not None


def parse_iso_date(value: str | None) -> Optional[date]:
    """'YYYY-MM-DD' → date, or None on any format or calendar violation."""
    if not has_date_shape(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_instant(value: str | None) -> Optional[datetime]:
    """
    Parse 'YYYY-MM-DD HH:MM:SS' or ISO-8601 (with or without offset)
    into an aware datetime in its own offset.  Returns None when
    unparseable.  The result may sit too close to year 1 or 9999 to be
    shifted into another zone; use parse_published_at for that.
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=market_tz())
    return parsed


def parse_published_at(value: str | None) -> Optional[datetime]:
    """
    Like parse_instant, but None also for instants that cannot be
    expressed in UTC and on the market clock.
    """
    parsed = parse_instant(value)
    if parsed is None:
        return None
    try:
        parsed.astimezone(timezone.utc)
        parsed.astimezone(market_tz())
    except (OverflowError, ValueError):
        return None
    return parsed


def to_storage(moment: datetime) -> datetime:
    """Aware datetime → naive UTC, the form kept in the news table."""
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def market_date(moment: datetime) -> date:
    """Calendar date of an instant as seen on the market clock."""
    return moment.astimezone(market_tz()).date()


def market_day_bounds(start: date | None, end: date | None):
    """
    Inclusive [start 00:00, end 24:00) market-day range as naive UTC
    storage values.  Either bound may be None; a bound at the edge of
    the calendar is treated as open.
    """
    tz = market_tz()
    lower = upper = None
    if start is not None:
        try:
            lower = to_storage(datetime.combine(start, datetime.min.time(), tz))
        except OverflowError:
            lower = None
    if end is not None:
        try:
            upper = to_storage(datetime.combine(end + timedelta(days=1),
                                                datetime.min.time(), tz))
        except OverflowError:
            upper = None
    return lower, upper
