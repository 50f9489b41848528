"""
db.models - SQLAlchemy ORM declarations.

Tables
------
stocks        - stock master; one row per stock code.
stock_prices  - daily OHLCV rows, unique per (stock_id, trade_date).
news          - news items, unique per (stock_id, published_at, title).
                published_at is stored as naive UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger, Column, Date, DateTime, ForeignKey, Index, Integer,
    Numeric, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _num(value) -> str | None:
    return None if value is None else str(value)


class Base(DeclarativeBase):
    pass


class Stock(Base):
    __tablename__ = "stocks"

    stock_id   = Column(Integer, primary_key=True, autoincrement=True)
    stock_code = Column(String(10), unique=True, nullable=False, index=True)
    stock_name = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    prices = relationship(
        "StockPrice", back_populates="stock",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    news = relationship(
        "News", back_populates="stock",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "stock_id": self.stock_id,
            "stock_code": self.stock_code,
            "stock_name": self.stock_name,
            "created_at": self.created_at.isoformat() if self.created_at else "",
            "updated_at": self.updated_at.isoformat() if self.updated_at else "",
        }


class StockPrice(Base):
    __tablename__ = "stock_prices"

    price_id    = Column(Integer, primary_key=True, autoincrement=True)
    stock_id    = Column(Integer,
                         ForeignKey("stocks.stock_id", ondelete="CASCADE"),
                         nullable=False)
    trade_date  = Column(Date, nullable=False)

    # ── OHLCV ──────────────────────────────────────────────────────────
    open_price  = Column(Numeric(12, 2), nullable=False)
    high_price  = Column(Numeric(12, 2), nullable=False)
    low_price   = Column(Numeric(12, 2), nullable=False)
    close_price = Column(Numeric(12, 2), nullable=False)
    volume      = Column(BigInteger, nullable=False, default=0)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    stock = relationship("Stock", back_populates="prices")

    __table_args__ = (
        UniqueConstraint("stock_id", "trade_date", name="uq_price_stock_date"),
        Index("ix_price_stock_date", "stock_id", "trade_date"),
    )

    def to_dict(self) -> dict:
        return {
            "price_id": self.price_id,
            "stock_id": self.stock_id,
            "trade_date": self.trade_date.isoformat(),
            "open_price": _num(self.open_price),
            "high_price": _num(self.high_price),
            "low_price": _num(self.low_price),
            "close_price": _num(self.close_price),
            "volume": str(self.volume),
        }


class News(Base):
    __tablename__ = "news"

    news_id      = Column(Integer, primary_key=True, autoincrement=True)
    stock_id     = Column(Integer,
                          ForeignKey("stocks.stock_id", ondelete="CASCADE"),
                          nullable=False)
    published_at = Column(DateTime, nullable=False)       # naive UTC
    title        = Column(String(255), nullable=False)
    summary      = Column(Text, nullable=True)
    url          = Column(String(500), nullable=True)
    source       = Column(String(100), nullable=True)
    sentiment    = Column(String(10), nullable=False, default="neutral")
    sentiment_score = Column(Numeric(3, 2), nullable=True)

    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    stock = relationship("Stock", back_populates="news")

    __table_args__ = (
        UniqueConstraint("stock_id", "published_at", "title",
                         name="uq_news_stock_published_title"),
        Index("ix_news_stock_published", "stock_id", "published_at"),
    )

    def to_dict(self) -> dict:
        published = self.published_at.replace(tzinfo=timezone.utc)
        return {
            "news_id": self.news_id,
            "stock_id": self.stock_id,
            "published_at": published.isoformat(),
            "title": self.title,
            "summary": self.summary,
            "url": self.url,
            "source": self.source,
            "sentiment": self.sentiment,
            "sentiment_score": _num(self.sentiment_score),
        }
