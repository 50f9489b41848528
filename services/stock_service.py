"""
services.stock_service - Stock master CRUD and the stock directory
used by the import engine.

All session management is the caller's responsibility (open before,
close/commit after).
"""

from __future__ import annotations

import logging
import re

from sqlalchemy.orm import Session

from db.models import Stock

logger = logging.getLogger(__name__)

STOCK_CODE_RE = re.compile(r"[A-Za-z0-9]{4}")
MAX_NAME_LEN = 100


class StockCodeDuplicateError(Exception):
    """Raised when registering a stock code that already exists."""

    def __init__(self, stock_code: str):
        super().__init__(f"stock code {stock_code} is already registered")
        self.stock_code = stock_code


def normalize_code(stock_code: str) -> str:
    return (stock_code or "").strip().upper()


def validate_stock_input(stock_code: str, stock_name: str) -> str | None:
    """Return an error message for bad registration input, else None."""
    if not STOCK_CODE_RE.fullmatch((stock_code or "").strip()):
        return "stock_code must be 4 letters or digits"
    name = (stock_name or "").strip()
    if not name:
        return "stock_name must not be empty"
    if len(name) > MAX_NAME_LEN:
        return f"stock_name must be at most {MAX_NAME_LEN} characters"
    return None


class StockService:

    @staticmethod
    def list_all(session: Session) -> list[Stock]:
        """Every stock, most recently registered first."""
        return (session.query(Stock)
                .order_by(Stock.created_at.desc(), Stock.stock_id.desc())
                .all())

    @staticmethod
    def get(session: Session, stock_id: int) -> Stock | None:
        return session.get(Stock, stock_id)

    @staticmethod
    def get_by_code(session: Session, stock_code: str) -> Stock | None:
        return (session.query(Stock)
                .filter(Stock.stock_code == normalize_code(stock_code))
                .one_or_none())

    @staticmethod
    def create(session: Session, stock_code: str, stock_name: str) -> Stock:
        code = normalize_code(stock_code)
        if StockService.get_by_code(session, code):
            raise StockCodeDuplicateError(code)
        stock = Stock(stock_code=code, stock_name=stock_name.strip())
        session.add(stock)
        session.flush()
        logger.info(f"Stock registered: {code} {stock.stock_name}")
        return stock


class StockDirectory:
    """Lookup by stock code, as consumed by import_engine.CsvImporter."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_code(self, stock_code: str) -> Stock | None:
        return StockService.get_by_code(self.session, stock_code)
