"""
services.price_service - Row store for daily prices.

Rows are keyed by (stock_id, trade_date).  Writes flush immediately so
constraint violations surface on the row that caused them; committing
is left to the caller.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from db.models import StockPrice
from import_engine.row_processor import PriceRow

# Rows per INSERT statement; keeps SQLite under its bound-parameter limit
BULK_CHUNK = 500


def _values(row: PriceRow) -> dict:
    return {
        "trade_date": date.fromisoformat(row.date),
        "open_price": row.open,
        "high_price": row.high,
        "low_price": row.low,
        "close_price": row.close,
        "volume": int(row.volume),
    }


class PriceStore:

    def __init__(self, session: Session):
        self.session = session

    def savepoint(self):
        return self.session.begin_nested()

    # ── Lookups ────────────────────────────────────────────────────────

    def _by_key(self, stock_id: int, trade_date: date):
        return self.session.query(StockPrice).filter(
            StockPrice.stock_id == stock_id,
            StockPrice.trade_date == trade_date,
        )

    def exists(self, stock_id: int, key: tuple) -> bool:
        (trade_date,) = key
        return self._by_key(stock_id, trade_date).first() is not None

    def find_id_by_key(self, stock_id: int, key: tuple) -> int | None:
        (trade_date,) = key
        if trade_date is None:
            return None
        found = self._by_key(stock_id, trade_date).first()
        return found.price_id if found else None

    def count(self, stock_id: int) -> int:
        return self.session.query(func.count(StockPrice.price_id)).filter(
            StockPrice.stock_id == stock_id).scalar()

    def list_range(
        self,
        stock_id: int,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[StockPrice]:
        """Prices in [start, end], oldest first."""
        q = self._in_range(stock_id, start, end).order_by(StockPrice.trade_date.asc())
        if limit:
            q = q.limit(limit)
        return q.all()

    # ── Writes ─────────────────────────────────────────────────────────

    def create(self, stock_id: int, row: PriceRow) -> StockPrice:
        price = StockPrice(stock_id=stock_id, **_values(row))
        self.session.add(price)
        self.session.flush()
        return price

    def upsert(self, stock_id: int, row: PriceRow) -> StockPrice:
        values = _values(row)
        price = self._by_key(stock_id, values["trade_date"]).first()
        if price is None:
            price = StockPrice(stock_id=stock_id, **values)
            self.session.add(price)
        else:
            for attr, val in values.items():
                setattr(price, attr, val)
        self.session.flush()
        return price

    def bulk_create_skip_duplicates(self, stock_id: int, rows: list[PriceRow]) -> int:
        """
        INSERT … ON CONFLICT DO NOTHING for all rows.  Returns how many
        rows were actually inserted.  Raises NotImplementedError on
        backends without that clause.
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        elif dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            raise NotImplementedError(f"bulk insert not supported on {dialect}")

        before = self.count(stock_id)
        for i in range(0, len(rows), BULK_CHUNK):
            chunk = [{"stock_id": stock_id, **_values(r)} for r in rows[i:i + BULK_CHUNK]]
            stmt = insert(StockPrice).values(chunk).on_conflict_do_nothing(
                index_elements=["stock_id", "trade_date"])
            self.session.execute(stmt)
        return self.count(stock_id) - before

    def delete_in_range(
        self,
        stock_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> int:
        """Delete rows with start <= trade_date <= end; open-ended bounds allowed."""
        return self._in_range(stock_id, start, end).delete(synchronize_session=False)

    def _in_range(self, stock_id: int, start: date | None, end: date | None):
        q = self.session.query(StockPrice).filter(StockPrice.stock_id == stock_id)
        if start is not None:
            q = q.filter(StockPrice.trade_date >= start)
        if end is not None:
            q = q.filter(StockPrice.trade_date <= end)
        return q
