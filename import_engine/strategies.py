"""
import_engine.strategies - Duplicate handling while writing valid rows.

A strategy walks the valid rows of one import, in source order, and
writes them through a row store.  Stores expose:

    savepoint()                              → context manager
    exists(stock_id, key)                    → bool
    create(stock_id, row)
    upsert(stock_id, row)
    bulk_create_skip_duplicates(stock_id, rows) → inserted count

Every write runs inside its own savepoint, so a failing row is rolled
back alone and reported as a PERSISTENCE_FAILED error while the rest
carry on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from import_engine.errors import ErrorKind, InvalidOptionError
from import_engine.report import ImportErrorDetail

logger = logging.getLogger(__name__)

STRATEGY_NAMES = ("skip", "overwrite")


@dataclass
class PersistOutcome:
    success_count: int = 0
    skip_count: int = 0
    errors: list[ImportErrorDetail] = field(default_factory=list)


class DuplicateStrategy:
    name = ""

    def persist(self, store, stock_id: int, rows: list, fmt) -> PersistOutcome:
        raise NotImplementedError

    @staticmethod
    def _row_failed(outcome: PersistOutcome, row, fmt, exc: Exception) -> None:
        logger.warning(f"{fmt.name} row on line {row.line} not saved: {exc}")
        outcome.errors.append(ImportErrorDetail(
            row=row.line,
            message=f"database error: {exc}",
            key=fmt.key_echo(row),
            kind=ErrorKind.PERSISTENCE_FAILED,
        ))


class SkipStrategy(DuplicateStrategy):
    """Existing natural key → skip; otherwise create."""

    name = "skip"

    def persist(self, store, stock_id, rows, fmt):
        outcome = PersistOutcome()
        for row in rows:
            try:
                with store.savepoint():
                    if store.exists(stock_id, fmt.natural_key(row)):
                        outcome.skip_count += 1
                        continue
                    store.create(stock_id, row)
                outcome.success_count += 1
            except Exception as exc:
                self._row_failed(outcome, row, fmt, exc)
        return outcome


class OverwriteStrategy(DuplicateStrategy):
    """Upsert every row; no skip accounting."""

    name = "overwrite"

    def persist(self, store, stock_id, rows, fmt):
        outcome = PersistOutcome()
        for row in rows:
            try:
                with store.savepoint():
                    store.upsert(stock_id, row)
                outcome.success_count += 1
            except Exception as exc:
                self._row_failed(outcome, row, fmt, exc)
        return outcome


class BulkSkipStrategy(DuplicateStrategy):
    """
    Two phases:
      1. one bulk insert that ignores natural-key conflicts, all or nothing;
      2. if that raises, the sequential fallback strategy on the same rows.
    """

    name = "skip"

    def __init__(self, fallback: DuplicateStrategy | None = None):
        self.fallback = fallback or SkipStrategy()

    def persist(self, store, stock_id, rows, fmt):
        if not rows:
            return PersistOutcome()
        try:
            with store.savepoint():
                inserted = store.bulk_create_skip_duplicates(stock_id, rows)
        except Exception as exc:
            logger.error(f"{fmt.name} bulk insert failed, retrying row by row: {exc}")
            return self.fallback.persist(store, stock_id, rows, fmt)
        return PersistOutcome(success_count=inserted,
                              skip_count=len(rows) - inserted)


def strategy_for(name: str, *, bulk: bool = False) -> DuplicateStrategy:
    """Map a duplicate_strategy option onto a strategy object."""
    if name == "skip":
        return BulkSkipStrategy() if bulk else SkipStrategy()
    if name == "overwrite":
        return OverwriteStrategy()
    raise InvalidOptionError(
        f"duplicate_strategy must be one of {', '.join(STRATEGY_NAMES)} (got {name!r})",
        duplicate_strategy=name,
    )
