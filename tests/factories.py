import datetime
from decimal import Decimal

import factory

from db.models import News, Stock, StockPrice
from import_engine.field_map import NEWS_HEADERS, PRICE_HEADERS


class StockFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating Stock rows."""

    class Meta:
        model = Stock
        sqlalchemy_session_persistence = "commit"

    stock_code = factory.Sequence(lambda n: f"{1000 + n}")
    stock_name = factory.Sequence(lambda n: f"Stock {n}")


class StockPriceFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating StockPrice rows; one trading day per instance."""

    class Meta:
        model = StockPrice
        sqlalchemy_session_persistence = "commit"

    stock = factory.SubFactory(StockFactory)
    trade_date = factory.Sequence(
        lambda n: datetime.date(2024, 1, 1) + datetime.timedelta(days=n))
    open_price = Decimal("100.00")
    high_price = Decimal("105.00")
    low_price = Decimal("98.00")
    close_price = Decimal("103.00")
    volume = 1_000_000


class NewsFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Factory for creating News rows; published_at is naive UTC."""

    class Meta:
        model = News
        sqlalchemy_session_persistence = "commit"

    stock = factory.SubFactory(StockFactory)
    published_at = factory.Sequence(
        lambda n: datetime.datetime(2024, 1, 1, 1, 0) + datetime.timedelta(hours=n))
    title = factory.Sequence(lambda n: f"Headline {n}")
    summary = "summary"
    url = factory.Sequence(lambda n: f"https://example.com/news/{n}")
    source = "Example Wire"
    sentiment = factory.Faker("random_element", elements=["positive", "negative", "neutral"])
    sentiment_score = Decimal("0.10")


ALL_FACTORIES = (StockFactory, StockPriceFactory, NewsFactory)


def bind(session):
    """Point every factory at the given session."""
    for f in ALL_FACTORIES:
        f._meta.sqlalchemy_session = session


# ── CSV builders ───────────────────────────────────────────────────────

def price_csv(*rows: str, header: str = ",".join(PRICE_HEADERS)) -> str:
    return "\n".join((header,) + rows) + "\n"


def news_csv(*rows: str, header: str = ",".join(NEWS_HEADERS)) -> str:
    return "\n".join((header,) + rows) + "\n"
