"""
import_engine.formats - Per-domain configuration of the one import pipeline.

A CsvFormat bundles everything that differs between the price and news
imports: header, tokenizer mode, row parser, row validator, natural key
and the date used by the optional range filter.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from import_engine.datetimes import market_date, parse_iso_date, parse_published_at, to_storage
from import_engine.field_map import NEWS_HEADERS, PRICE_HEADERS
from import_engine.row_processor import NewsRow, PriceRow, parse_news_row, parse_price_row
from import_engine.validators import validate_news_row, validate_price_row


@dataclass(frozen=True)
class CsvFormat:
    name: str
    headers: tuple[str, ...]
    quoted: bool
    parse_row: Callable[[list[str], int], object]
    validate_row: Callable[[object], Optional[str]]
    natural_key: Callable[[object], tuple]
    key_echo: Callable[[object], dict]
    row_date: Optional[Callable[[object], Optional[date]]] = None
    import_id_prefix: str = "import"
    supports_bulk: bool = False


# ── Prices: unique per (stock_id, trade_date) ──────────────────────────

def price_key(row: PriceRow) -> tuple:
    return (parse_iso_date(row.date),)


def price_echo(row: PriceRow) -> dict:
    return {"date": row.date}


# ── News: unique per (stock_id, published_at, title) ───────────────────

def news_key(row: NewsRow) -> tuple:
    moment = parse_published_at(row.published_at)
    return (to_storage(moment) if moment else None, row.title)


def news_echo(row: NewsRow) -> dict:
    return {"published_at": row.published_at, "title": row.title or "(untitled)"}


def news_date(row: NewsRow) -> Optional[date]:
    moment = parse_published_at(row.published_at)
    return market_date(moment) if moment else None


PRICE_FORMAT = CsvFormat(
    name="price",
    headers=PRICE_HEADERS,
    quoted=False,
    parse_row=parse_price_row,
    validate_row=validate_price_row,
    natural_key=price_key,
    key_echo=price_echo,
    import_id_prefix="import",
    supports_bulk=True,
)

NEWS_FORMAT = CsvFormat(
    name="news",
    headers=NEWS_HEADERS,
    quoted=True,
    parse_row=parse_news_row,
    validate_row=validate_news_row,
    natural_key=news_key,
    key_echo=news_echo,
    row_date=news_date,
    import_id_prefix="news_import",
)
