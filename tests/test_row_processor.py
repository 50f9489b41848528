import logging
from decimal import Decimal

import pytest

from import_engine import NEWS_FORMAT, PRICE_FORMAT
from import_engine.errors import HeaderFormatError, RowParseError
from import_engine.row_processor import (
    parse_csv,
    parse_news_row,
    parse_price_row,
    parse_sentiment,
    parse_sentiment_score,
)
from tests.factories import news_csv, price_csv


# ── Price rows ─────────────────────────────────────────────────────────

def test_parse_price_row_builds_decimals_and_integer_volume():
    row = parse_price_row(["2024-01-15", "2500.5", "2550", "2480", "2530.25", "1500000"], 2)
    assert row.date == "2024-01-15"
    assert row.open == Decimal("2500.5")
    assert row.close == Decimal("2530.25")
    assert row.volume == 1500000 and isinstance(row.volume, int)
    assert row.line == 2


def test_parse_price_row_keeps_fractional_volume_for_the_validator():
    row = parse_price_row(["2024-01-15", "1", "1", "1", "1", "10.5"], 2)
    assert row.volume == Decimal("10.5")


def test_parse_price_row_wrong_column_count():
    with pytest.raises(RowParseError) as exc_info:
        parse_price_row(["2024-01-15", "1", "2"], 4)
    assert exc_info.value.line == 4
    assert exc_info.value.reason == "expected 6 columns, got 3"


def test_parse_price_row_empty_date():
    with pytest.raises(RowParseError, match="date is empty"):
        parse_price_row(["", "1", "1", "1", "1", "1"], 2)


@pytest.mark.parametrize("idx,label", [
    (1, "open price"), (2, "high price"), (3, "low price"),
    (4, "close price"), (5, "volume"),
])
def test_parse_price_row_non_numeric_field_names_the_column(idx, label):
    fields = ["2024-01-15", "100", "105", "98", "103", "1000"]
    fields[idx] = "abc"
    with pytest.raises(RowParseError) as exc_info:
        parse_price_row(fields, 3)
    assert exc_info.value.message == f"line 3: {label} is not numeric: abc"


def test_parse_price_row_rejects_nan_and_infinity():
    with pytest.raises(RowParseError):
        parse_price_row(["2024-01-15", "NaN", "1", "1", "1", "1"], 2)
    with pytest.raises(RowParseError):
        parse_price_row(["2024-01-15", "1", "Infinity", "1", "1", "1"], 2)


# ── News rows ──────────────────────────────────────────────────────────

def test_parse_news_row_maps_empty_optionals_to_none():
    row = parse_news_row(["2024-01-15 10:30:00", "Title", "", "", "", "", ""], 2)
    assert row.summary is None and row.url is None and row.source is None
    assert row.sentiment == "neutral"
    assert row.sentiment_score is None


def test_parse_news_row_requires_published_at_and_title():
    with pytest.raises(RowParseError, match="published_at is empty"):
        parse_news_row(["", "Title", "", "", "", "", ""], 2)
    with pytest.raises(RowParseError, match="title is empty"):
        parse_news_row(["2024-01-15 10:30:00", "", "", "", "", "", ""], 2)


def test_parse_news_row_wrong_column_count():
    with pytest.raises(RowParseError, match="expected 7 columns, got 6"):
        parse_news_row(["a", "b", "c", "d", "e", "f"], 2)


def test_parse_sentiment_is_case_insensitive_and_defaults_to_neutral():
    assert parse_sentiment("POSITIVE") == "positive"
    assert parse_sentiment("Negative") == "negative"
    assert parse_sentiment("") == "neutral"
    assert parse_sentiment("bullish") == "neutral"


def test_parse_sentiment_score_is_lenient():
    assert parse_sentiment_score("0.75") == Decimal("0.75")
    assert parse_sentiment_score("") is None
    assert parse_sentiment_score("very good") is None


def test_lenient_sentiment_parsing_logs_warnings(caplog):
    with caplog.at_level(logging.WARNING, logger="import_engine.row_processor"):
        assert parse_sentiment("bullish", 5) == "neutral"
        assert parse_sentiment_score("x", 6) is None
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert [r.getMessage().split(":")[0] for r in warnings] == ["line 5", "line 6"]


def test_empty_sentiment_values_are_silent(caplog):
    with caplog.at_level(logging.WARNING, logger="import_engine.row_processor"):
        parse_sentiment("", 2)
        parse_sentiment_score("", 2)
    assert caplog.records == []


# ── Whole file ─────────────────────────────────────────────────────────

def test_parse_csv_rejects_bad_header_before_rows():
    """Test that a 5-column price header fails before any data row is read."""
    raw = price_csv("2024-01-15,100,105,98,103,1000", header="日付,始値,高値,安値,終値")
    with pytest.raises(HeaderFormatError):
        parse_csv(raw, PRICE_FORMAT)


def test_parse_csv_news_with_quoted_commas():
    raw = news_csv('2024-01-15 10:30:00,"Results beat, again","Q3, strong",'
                   'https://example.com/a,Nikkei,positive,0.8')
    (row,) = parse_csv(raw, NEWS_FORMAT)
    assert row.title == "Results beat, again"
    assert row.summary == "Q3, strong"
    assert row.line == 2


def test_price_and_news_parsing_strictness_differs():
    """
    Documented quirk: one non-numeric price field aborts the whole price
    CSV, while a non-numeric news sentiment score only drops the score.
    """
    bad_price = price_csv(
        "2024-01-15,100,105,98,103,1000",
        "2024-01-16,abc,105,98,103,1000",
    )
    with pytest.raises(RowParseError) as exc_info:
        parse_csv(bad_price, PRICE_FORMAT)
    assert exc_info.value.line == 3

    bad_score = news_csv(
        "2024-01-15 10:00:00,First,,,,positive,0.5",
        "2024-01-16 10:00:00,Second,,,,negative,not-a-number",
    )
    rows = parse_csv(bad_score, NEWS_FORMAT)
    assert len(rows) == 2
    assert rows[1].sentiment_score is None
