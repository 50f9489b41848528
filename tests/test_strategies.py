from contextlib import nullcontext
from decimal import Decimal

import pytest

from import_engine import PRICE_FORMAT
from import_engine.errors import ErrorKind, InvalidOptionError
from import_engine.row_processor import PriceRow
from import_engine.strategies import (
    BulkSkipStrategy,
    OverwriteStrategy,
    SkipStrategy,
    strategy_for,
)


class FakeStore:
    """In-memory row store keyed by (stock_id, natural key)."""

    def __init__(self, existing=(), fail_on=(), bulk_error=None):
        self.rows = {key: "old" for key in existing}
        self.fail_on = set(fail_on)
        self.bulk_error = bulk_error
        self.bulk_calls = 0

    def savepoint(self):
        return nullcontext()

    def exists(self, stock_id, key):
        return (stock_id, key) in self.rows

    def create(self, stock_id, row):
        if row.line in self.fail_on:
            raise RuntimeError("disk full")
        self.rows[(stock_id, PRICE_FORMAT.natural_key(row))] = row

    def upsert(self, stock_id, row):
        self.create(stock_id, row)

    def bulk_create_skip_duplicates(self, stock_id, rows):
        self.bulk_calls += 1
        if self.bulk_error:
            raise self.bulk_error
        inserted = 0
        for row in rows:
            key = (stock_id, PRICE_FORMAT.natural_key(row))
            if key not in self.rows:
                self.rows[key] = row
                inserted += 1
        return inserted


def row(day, line):
    one = Decimal("100")
    return PriceRow(date=f"2024-01-{day:02d}", open=one, high=one, low=one,
                    close=one, volume=10, line=line)


def key(day):
    return (1, PRICE_FORMAT.natural_key(row(day, 0)))


def test_strategy_for_maps_names():
    assert isinstance(strategy_for("skip"), SkipStrategy)
    assert isinstance(strategy_for("skip", bulk=True), BulkSkipStrategy)
    assert isinstance(strategy_for("overwrite", bulk=True), OverwriteStrategy)


def test_strategy_for_rejects_unknown_name():
    with pytest.raises(InvalidOptionError) as exc_info:
        strategy_for("merge")
    assert exc_info.value.details == {"duplicate_strategy": "merge"}


def test_skip_counts_existing_keys_as_skipped():
    store = FakeStore(existing=[key(15)])
    outcome = SkipStrategy().persist(store, 1, [row(15, 2), row(16, 3)], PRICE_FORMAT)
    assert (outcome.success_count, outcome.skip_count) == (1, 1)
    assert store.rows[key(15)] == "old"


def test_skip_keeps_going_after_a_failed_row():
    store = FakeStore(fail_on=[3])
    outcome = SkipStrategy().persist(store, 1, [row(15, 2), row(16, 3), row(17, 4)],
                                     PRICE_FORMAT)
    assert outcome.success_count == 2
    (err,) = outcome.errors
    assert err.row == 3
    assert err.kind is ErrorKind.PERSISTENCE_FAILED
    assert err.message == "database error: disk full"
    assert err.key == {"date": "2024-01-16"}


def test_overwrite_replaces_existing_rows_without_skips():
    store = FakeStore(existing=[key(15)])
    outcome = OverwriteStrategy().persist(store, 1, [row(15, 2), row(16, 3)], PRICE_FORMAT)
    assert (outcome.success_count, outcome.skip_count) == (2, 0)
    assert store.rows[key(15)] != "old"


def test_bulk_skip_uses_one_bulk_call():
    store = FakeStore(existing=[key(15)])
    outcome = BulkSkipStrategy().persist(store, 1, [row(15, 2), row(16, 3)], PRICE_FORMAT)
    assert store.bulk_calls == 1
    assert (outcome.success_count, outcome.skip_count) == (1, 1)


def test_bulk_skip_falls_back_to_row_by_row():
    """Test that a failing bulk phase hands every row to the sequential fallback."""
    store = FakeStore(existing=[key(15)], fail_on=[4],
                      bulk_error=NotImplementedError("no ON CONFLICT"))
    rows = [row(15, 2), row(16, 3), row(17, 4)]
    outcome = BulkSkipStrategy().persist(store, 1, rows, PRICE_FORMAT)
    assert store.bulk_calls == 1
    assert (outcome.success_count, outcome.skip_count) == (1, 1)
    assert [e.row for e in outcome.errors] == [4]


def test_bulk_skip_with_custom_fallback():
    store = FakeStore(existing=[key(15)], bulk_error=RuntimeError("boom"))
    outcome = BulkSkipStrategy(fallback=OverwriteStrategy()).persist(
        store, 1, [row(15, 2)], PRICE_FORMAT)
    assert (outcome.success_count, outcome.skip_count) == (1, 0)


def test_bulk_skip_with_no_rows_touches_nothing():
    store = FakeStore()
    outcome = BulkSkipStrategy().persist(store, 1, [], PRICE_FORMAT)
    assert store.bulk_calls == 0
    assert outcome.success_count == outcome.skip_count == 0
