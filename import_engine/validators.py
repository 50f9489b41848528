"""
import_engine.validators - Domain checks on parsed rows.

validate_price_row / validate_news_row return None for a valid row or
the first failing message.  Checks run in a fixed order and never
raise, so the same input always yields the same message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional
from urllib.parse import urlparse

from import_engine.datetimes import (
    MIN_DATE, MIN_INSTANT, has_date_shape, parse_instant, parse_iso_date,
)
from import_engine.errors import ErrorKind
from import_engine.field_map import SENTIMENTS
from import_engine.report import ImportErrorDetail
from import_engine.row_processor import NewsRow, PriceRow

MAX_VOLUME = 1_000_000_000_000

MAX_TITLE_LEN = 255
MAX_URL_LEN = 500
MAX_SOURCE_LEN = 100
MIN_SCORE, MAX_SCORE = Decimal("-1.00"), Decimal("1.00")


# ── Price rows ─────────────────────────────────────────────────────────

def validate_price_row(row: PriceRow, today: date | None = None) -> Optional[str]:
    return (
        _check_trade_date(row.date, today or date.today())
        or _check_positive_prices(row)
        or _check_ohlc(row)
        or _check_volume(row.volume)
    )


def _check_trade_date(value: str, today: date) -> Optional[str]:
    if not has_date_shape(value):
        return "date must be in YYYY-MM-DD format"
    trade_date = parse_iso_date(value)
    if trade_date is None:
        # e.g. 2024-02-30
        return "date is not a valid calendar date"
    if trade_date > today:
        return "date must not be in the future"
    if trade_date < MIN_DATE:
        return "date must not be before 1900-01-01"
    return None


def _check_positive_prices(row: PriceRow) -> Optional[str]:
    for label, price in (("open", row.open), ("high", row.high),
                         ("low", row.low), ("close", row.close)):
        if price <= 0:
            return f"{label} price must be positive"
    return None


def _check_ohlc(row: PriceRow) -> Optional[str]:
    if row.high < row.low:
        return "high price is below low price"
    if row.high < row.open:
        return "high price is below open price"
    if row.high < row.close:
        return "high price is below close price"
    if row.low > row.open:
        return "low price is above open price"
    if row.low > row.close:
        return "low price is above close price"

    prices = (row.open, row.high, row.low, row.close)
    top, bottom = max(prices), min(prices)
    # range > 50% of the midpoint, i.e. 4 * range > top + bottom
    if (top - bottom) * 4 > top + bottom:
        return "daily price range is abnormally large (check the data)"
    return None


def _check_volume(volume) -> Optional[str]:
    if volume < 0:
        return "volume must not be negative"
    if volume != int(volume):
        return "volume must be an integer"
    if volume > MAX_VOLUME:
        return "volume is abnormally large (check the data)"
    return None


# ── News rows ──────────────────────────────────────────────────────────

def validate_news_row(row: NewsRow, now: datetime | None = None) -> Optional[str]:
    return (
        _check_published_at(row.published_at, now or datetime.now(timezone.utc))
        or _check_title(row.title)
        or (row.url and _check_url(row.url))
        or (row.source and _check_source(row.source))
        or (row.sentiment and _check_sentiment(row.sentiment))
        or (row.sentiment_score is not None and _check_score(row.sentiment_score))
        or None
    )


def _check_published_at(value: str, now: datetime) -> Optional[str]:
    if not value or not value.strip():
        return "published_at is empty"
    moment = parse_instant(value)
    if moment is None:
        return ("published_at must be YYYY-MM-DD HH:MM:SS "
                "or ISO 8601")
    if moment > now:
        return "published_at must not be in the future"
    if moment < MIN_INSTANT:
        return "published_at must not be before 1900-01-01"
    return None


def _check_title(title: str) -> Optional[str]:
    if not title or not title.strip():
        return "title is required"
    if len(title) > MAX_TITLE_LEN:
        return f"title must be at most {MAX_TITLE_LEN} characters"
    return None


def _check_url(url: str) -> Optional[str]:
    if len(url) > MAX_URL_LEN:
        return f"url must be at most {MAX_URL_LEN} characters"
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return "url must start with http:// or https://"
    return None


def _check_source(source: str) -> Optional[str]:
    if len(source) > MAX_SOURCE_LEN:
        return f"source must be at most {MAX_SOURCE_LEN} characters"
    return None


def _check_sentiment(sentiment: str) -> Optional[str]:
    if sentiment not in SENTIMENTS:
        return "sentiment must be one of positive, negative, neutral"
    return None


def _check_score(score: Decimal) -> Optional[str]:
    if score < MIN_SCORE or score > MAX_SCORE:
        return "sentiment score must be between -1.00 and 1.00"
    return None


# ── Batch ──────────────────────────────────────────────────────────────

@dataclass
class ValidationOutcome:
    valid: list = field(default_factory=list)
    errors: list[ImportErrorDetail] = field(default_factory=list)


def validate_batch(
    rows: list,
    validate: Callable[[object], Optional[str]],
    key_echo: Callable[[object], dict],
) -> ValidationOutcome:
    """
    Partition rows into valid rows and errors.  Each error reports the
    row's source line; data row i (0-based) sits on line i + 2.
    """
    outcome = ValidationOutcome()
    for idx, row in enumerate(rows):
        message = validate(row)
        if message:
            outcome.errors.append(ImportErrorDetail(
                row=getattr(row, "line", 0) or idx + 2,
                message=message,
                key=key_echo(row),
                kind=ErrorKind.VALIDATION_FAILED,
            ))
        else:
            outcome.valid.append(row)
    return outcome
