"""
services.import_service - Binds the CSV import engine to a DB session.

The functions here never commit; callers commit on success and roll
back on ImportEngineError.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from import_engine import (
    NEWS_FORMAT,
    PRICE_FORMAT,
    CsvImporter,
    DuplicateCheckResult,
    ImportOptions,
    ImportResult,
    NewsRow,
)
from services.news_service import NewsStore
from services.price_service import PriceStore
from services.stock_service import StockDirectory


def price_importer(session: Session) -> CsvImporter:
    return CsvImporter(PRICE_FORMAT, StockDirectory(session), PriceStore(session))


def news_importer(session: Session) -> CsvImporter:
    return CsvImporter(NEWS_FORMAT, StockDirectory(session), NewsStore(session))


# ── Prices ─────────────────────────────────────────────────────────────

def import_prices(
    session: Session,
    stock_code: str,
    content: str | bytes,
    duplicate_strategy: str = "skip",
) -> ImportResult:
    return price_importer(session).import_csv(
        stock_code, content, ImportOptions(duplicate_strategy=duplicate_strategy))


def delete_prices_by_range(
    session: Session,
    stock_code: str,
    start_date: str | None = None,
    end_date: str | None = None,
) -> int:
    return price_importer(session).delete_by_date_range(stock_code, start_date, end_date)


# ── News ───────────────────────────────────────────────────────────────

def import_news(
    session: Session,
    stock_code: str,
    content: str | bytes,
    duplicate_strategy: str = "skip",
    date_from: str | None = None,
    date_to: str | None = None,
) -> ImportResult:
    options = ImportOptions(duplicate_strategy=duplicate_strategy,
                            date_from=date_from, date_to=date_to)
    return news_importer(session).import_csv(stock_code, content, options)


def delete_news_by_range(
    session: Session,
    stock_code: str,
    start_date: str | None = None,
    end_date: str | None = None,
) -> int:
    return news_importer(session).delete_by_date_range(stock_code, start_date, end_date)


def check_news_duplicates(
    session: Session,
    stock_code: str,
    candidates: list[dict],
) -> DuplicateCheckResult:
    """candidates: [{"published_at": ..., "title": ...}, ...]"""
    rows = [
        NewsRow(published_at=str(c.get("published_at") or ""),
                title=str(c.get("title") or ""))
        for c in candidates
    ]
    return news_importer(session).check_duplicates(stock_code, rows)
