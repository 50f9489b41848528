from datetime import date, datetime

import pytest

from services.news_service import NewsStore
from services.price_service import PriceStore
from services.stock_service import (
    StockCodeDuplicateError,
    StockService,
    validate_stock_input,
)
from tests.factories import NewsFactory, StockFactory, StockPriceFactory


def test_create_stock_upper_cases_code(session):
    stock = StockService.create(session, "130a", " Sample ")
    assert stock.stock_code == "130A"
    assert stock.stock_name == "Sample"
    assert StockService.get_by_code(session, "130a") is stock


def test_create_stock_rejects_duplicate_code(session):
    StockFactory(stock_code="7203")
    with pytest.raises(StockCodeDuplicateError) as exc_info:
        StockService.create(session, "7203", "Again")
    assert exc_info.value.stock_code == "7203"


def test_list_all_newest_first(session):
    first = StockFactory()
    second = StockFactory()
    assert [s.stock_id for s in StockService.list_all(session)] == \
        [second.stock_id, first.stock_id]


@pytest.mark.parametrize("code,name,problem", [
    ("7203", "Toyota", None),
    ("72O3", "Toyota", None),
    ("720", "Toyota", "stock_code must be 4 letters or digits"),
    ("7203-", "Toyota", "stock_code must be 4 letters or digits"),
    ("7203", "  ", "stock_name must not be empty"),
    ("7203", "x" * 101, "stock_name must be at most 100 characters"),
])
def test_validate_stock_input(code, name, problem):
    assert validate_stock_input(code, name) == problem


def test_price_store_lists_range_oldest_first(session):
    stock = StockFactory()
    for day in (17, 15, 16, 20):
        StockPriceFactory(stock=stock, trade_date=date(2024, 1, day))
    store = PriceStore(session)
    listed = store.list_range(stock.stock_id, date(2024, 1, 15), date(2024, 1, 17))
    assert [p.trade_date.day for p in listed] == [15, 16, 17]
    assert len(store.list_range(stock.stock_id, limit=2)) == 2


def test_price_store_find_id_by_key(session):
    price = StockPriceFactory(trade_date=date(2024, 1, 15))
    store = PriceStore(session)
    assert store.find_id_by_key(price.stock_id, (date(2024, 1, 15),)) == price.price_id
    assert store.find_id_by_key(price.stock_id, (date(2024, 1, 16),)) is None
    assert store.find_id_by_key(price.stock_id, (None,)) is None


def test_news_store_lists_newest_first_with_paging(session):
    stock = StockFactory()
    for hour in (1, 3, 2):
        NewsFactory(stock=stock, published_at=datetime(2024, 1, 15, hour))
    store = NewsStore(session)
    listed = store.list_range(stock.stock_id)
    assert [n.published_at.hour for n in listed] == [3, 2, 1]
    assert [n.published_at.hour for n in store.list_range(stock.stock_id, limit=1, offset=1)] == [2]


def test_news_to_dict_marks_utc(session):
    item = NewsFactory(published_at=datetime(2024, 1, 15, 1, 0))
    assert item.to_dict()["published_at"] == "2024-01-15T01:00:00+00:00"
