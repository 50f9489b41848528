"""
import_engine.row_processor - Turn one tokenized CSV line into a typed row.

Single-responsibility: given the fields of one data line and its line
number, either return a PriceRow / NewsRow or raise RowParseError.
Domain rules (ranges, OHLC ordering, dates) belong to validators.

Price parsing is strict: any non-numeric price or volume is fatal.
News parsing is strict on structure and required fields but lenient on
sentiment and sentiment score, which fall back to a default with a
logged warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from import_engine.csv_parser import read_table
from import_engine.errors import RowParseError
from import_engine.field_map import (
    DEFAULT_SENTIMENT, NEWS_HEADERS, PRICE_HEADERS, PRICE_LABELS, SENTIMENTS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceRow:
    date: str
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int | Decimal     # Decimal only when non-integral (rejected later)
    line: int = 0


@dataclass(frozen=True)
class NewsRow:
    published_at: str
    title: str
    summary: Optional[str] = None
    url: Optional[str] = None
    source: Optional[str] = None
    sentiment: str = DEFAULT_SENTIMENT
    sentiment_score: Optional[Decimal] = None
    line: int = 0


# ── Price rows ─────────────────────────────────────────────────────────

def parse_price_row(fields: list[str], line: int) -> PriceRow:
    if len(fields) != len(PRICE_HEADERS):
        raise RowParseError(
            line, f"expected {len(PRICE_HEADERS)} columns, got {len(fields)}")

    trade_date = fields[0].strip()
    if not trade_date:
        raise RowParseError(line, "date is empty")

    return PriceRow(
        date=trade_date,
        open=_parse_decimal(fields[1], "open", line),
        high=_parse_decimal(fields[2], "high", line),
        low=_parse_decimal(fields[3], "low", line),
        close=_parse_decimal(fields[4], "close", line),
        volume=_parse_volume(fields[5], line),
        line=line,
    )


def _parse_decimal(raw: str, field: str, line: int) -> Decimal:
    value = raw.strip()
    try:
        num = Decimal(value)
    except InvalidOperation:
        num = None
    if num is None or not num.is_finite():
        raise RowParseError(line, f"{PRICE_LABELS[field]} is not numeric: {value}")
    return num


def _parse_volume(raw: str, line: int) -> int | Decimal:
    num = _parse_decimal(raw, "volume", line)
    if num == num.to_integral_value():
        return int(num)
    return num


# ── News rows ──────────────────────────────────────────────────────────

def parse_news_row(fields: list[str], line: int) -> NewsRow:
    if len(fields) != len(NEWS_HEADERS):
        raise RowParseError(
            line, f"expected {len(NEWS_HEADERS)} columns, got {len(fields)}")

    published_at, title, summary, url, source, sentiment, score = fields

    if not published_at:
        raise RowParseError(line, "published_at is empty")
    if not title:
        raise RowParseError(line, "title is empty")

    return NewsRow(
        published_at=published_at,
        title=title,
        summary=summary or None,
        url=url or None,
        source=source or None,
        sentiment=parse_sentiment(sentiment, line),
        sentiment_score=parse_sentiment_score(score, line),
        line=line,
    )


def parse_sentiment(raw: str | None, line: int = 0) -> str:
    """Lower-case match against the three values; anything else → neutral."""
    if not raw:
        return DEFAULT_SENTIMENT
    value = raw.lower()
    if value in SENTIMENTS:
        return value
    logger.warning(f"line {line}: unknown sentiment {raw!r}, using {DEFAULT_SENTIMENT}")
    return DEFAULT_SENTIMENT


def parse_sentiment_score(raw: str | None, line: int = 0) -> Optional[Decimal]:
    """Non-numeric score → None with a warning, never an error."""
    if not raw:
        return None
    try:
        num = Decimal(raw.strip())
    except InvalidOperation:
        num = None
    if num is None or not num.is_finite():
        logger.warning(f"line {line}: sentiment score is not numeric: {raw!r}")
        return None
    return num


# ── Whole file ─────────────────────────────────────────────────────────

def parse_csv(raw: str | bytes, fmt) -> list:
    """
    Tokenize, validate the header, and parse every data line using the
    CsvFormat fmt.  The first RowParseError aborts the whole call.
    """
    rows = []
    for line, fields in read_table(raw, fmt.headers, quoted=fmt.quoted):
        try:
            rows.append(fmt.parse_row(fields, line))
        except RowParseError as exc:
            logger.warning(f"{fmt.name} CSV parse failed: {exc}")
            raise
    logger.debug(f"{fmt.name} CSV parsed: {len(rows)} rows")
    return rows
