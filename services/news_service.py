"""
services.news_service - Row store for news items.

Rows are keyed by (stock_id, published_at, title); published_at is
kept as naive UTC.  A second row with the same key but a different
summary is the same logical item.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Session

from db.models import News
from import_engine.datetimes import market_day_bounds, parse_published_at, to_storage
from import_engine.field_map import DEFAULT_SENTIMENT
from import_engine.row_processor import NewsRow


def _values(row: NewsRow) -> dict:
    return {
        "summary": row.summary or None,
        "url": row.url or None,
        "source": row.source or None,
        "sentiment": row.sentiment or DEFAULT_SENTIMENT,
        "sentiment_score": row.sentiment_score,
    }


class NewsStore:

    def __init__(self, session: Session):
        self.session = session

    def savepoint(self):
        return self.session.begin_nested()

    # ── Lookups ────────────────────────────────────────────────────────

    def _by_key(self, stock_id: int, published_at: datetime, title: str):
        return self.session.query(News).filter(
            News.stock_id == stock_id,
            News.published_at == published_at,
            News.title == title,
        )

    def exists(self, stock_id: int, key: tuple) -> bool:
        return self.find_id_by_key(stock_id, key) is not None

    def find_id_by_key(self, stock_id: int, key: tuple) -> int | None:
        published_at, title = key
        if published_at is None:
            return None
        found = self._by_key(stock_id, published_at, title).first()
        return found.news_id if found else None

    def list_range(
        self,
        stock_id: int,
        start: date | None = None,
        end: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[News]:
        """News published on market days [start, end], newest first."""
        return (self._in_range(stock_id, start, end)
                .order_by(News.published_at.desc())
                .offset(offset).limit(limit).all())

    # ── Writes ─────────────────────────────────────────────────────────

    def create(self, stock_id: int, row: NewsRow) -> News:
        news = News(
            stock_id=stock_id,
            published_at=to_storage(parse_published_at(row.published_at)),
            title=row.title,
            **_values(row),
        )
        self.session.add(news)
        self.session.flush()
        return news

    def upsert(self, stock_id: int, row: NewsRow) -> News:
        published_at = to_storage(parse_published_at(row.published_at))
        news = self._by_key(stock_id, published_at, row.title).first()
        if news is None:
            return self.create(stock_id, row)
        for attr, val in _values(row).items():
            setattr(news, attr, val)
        self.session.flush()
        return news

    def delete_in_range(
        self,
        stock_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> int:
        """Delete news published on market days start..end (inclusive)."""
        return self._in_range(stock_id, start, end).delete(synchronize_session=False)

    def _in_range(self, stock_id: int, start: date | None, end: date | None):
        lower, upper = market_day_bounds(start, end)
        q = self.session.query(News).filter(News.stock_id == stock_id)
        if lower is not None:
            q = q.filter(News.published_at >= lower)
        if upper is not None:
            q = q.filter(News.published_at < upper)
        return q
