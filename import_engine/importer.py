"""
import_engine.importer - Top-level orchestrator.

Coordinates stock lookup → csv_parser / row_processor → date filter →
validators → duplicate strategy → ImportResult.  The same CsvImporter
runs both the price and the news import; only the CsvFormat differs.

Collaborators are passed in, never looked up:

    directory.find_by_code(code) → object with stock_id / stock_code /
                                   stock_name, or None
    store                        → see import_engine.strategies, plus
                                   delete_in_range(stock_id, start, end)
                                   and find_id_by_key(stock_id, key)

Nothing is written unless parsing of the whole input succeeded.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional

from import_engine.datetimes import parse_iso_date
from import_engine.errors import InvalidOptionError, StockNotFoundError
from import_engine.formats import CsvFormat
from import_engine.report import DuplicateCheckResult, ImportResult
from import_engine.row_processor import parse_csv
from import_engine.strategies import strategy_for
from import_engine.validators import validate_batch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportOptions:
    duplicate_strategy: str = "skip"
    date_from: Optional[str] = None      # YYYY-MM-DD, news only
    date_to: Optional[str] = None        # YYYY-MM-DD, news only


class CsvImporter:

    def __init__(self, fmt: CsvFormat, directory, store):
        self.fmt = fmt
        self.directory = directory
        self.store = store

    # ── Import ─────────────────────────────────────────────────────────

    def import_csv(
        self,
        stock_code: str,
        content: str | bytes,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """
        Import one CSV blob for one stock.

        Raises StockNotFoundError, EmptyInputError, HeaderFormatError,
        RowParseError or InvalidOptionError before anything is written.
        Row-level problems come back inside the result.
        """
        options = options or ImportOptions()
        fmt = self.fmt
        logger.info(f"{fmt.name} import started: stock={stock_code}, "
                    f"strategy={options.duplicate_strategy}")

        stock = self._resolve(stock_code)
        strategy = strategy_for(options.duplicate_strategy, bulk=fmt.supports_bulk)
        start, end = parse_date_range(options.date_from, options.date_to)

        rows = parse_csv(content, fmt)

        if fmt.row_date is not None and (start or end):
            rows = filter_by_date_range(rows, fmt.row_date, start, end)
            logger.debug(f"{fmt.name} date filter kept {len(rows)} rows")

        checked = validate_batch(rows, fmt.validate_row, fmt.key_echo)
        logger.debug(f"{fmt.name} validation: {len(checked.valid)} valid, "
                     f"{len(checked.errors)} invalid")

        written = strategy.persist(self.store, stock.stock_id, checked.valid, fmt)

        errors = sorted(checked.errors + written.errors, key=lambda e: e.row)
        result = ImportResult(
            import_id=generate_import_id(fmt.import_id_prefix),
            stock_code=stock.stock_code,
            stock_name=stock.stock_name,
            total_rows=len(rows),
            success_count=written.success_count,
            skip_count=written.skip_count,
            error_count=len(errors),
            errors=tuple(errors),
            imported_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(f"{fmt.name} import finished: {result.import_id} "
                    f"success={result.success_count}, skip={result.skip_count}, "
                    f"error={result.error_count}")
        return result

    # ── Secondary operations ───────────────────────────────────────────

    def delete_by_date_range(
        self,
        stock_code: str,
        start: str | None = None,
        end: str | None = None,
    ) -> int:
        """Delete the stock's rows in [start, end]; no bounds → all rows."""
        stock = self._resolve(stock_code)
        start_date, end_date = parse_date_range(start, end, names=("start_date", "end_date"))
        deleted = self.store.delete_in_range(stock.stock_id, start_date, end_date)
        logger.info(f"{self.fmt.name} rows deleted: stock={stock_code}, "
                    f"count={deleted}, range={start or '-'}..{end or '-'}")
        return deleted

    def check_duplicates(self, stock_code: str, candidates: Iterable) -> DuplicateCheckResult:
        """Report candidates whose natural key already exists.  Read-only."""
        stock = self._resolve(stock_code)
        candidates = list(candidates)
        id_field = f"existing_{self.fmt.name}_id"
        duplicates = []
        for row in candidates:
            existing_id = self.store.find_id_by_key(stock.stock_id,
                                                    self.fmt.natural_key(row))
            if existing_id is not None:
                duplicates.append({**self.fmt.key_echo(row), id_field: existing_id})
        return DuplicateCheckResult(
            total_news=len(candidates),
            duplicate_count=len(duplicates),
            duplicates=tuple(duplicates),
        )

    # ── Private helpers ────────────────────────────────────────────────

    def _resolve(self, stock_code: str):
        stock = self.directory.find_by_code(stock_code)
        if stock is None:
            raise StockNotFoundError(stock_code)
        return stock


def parse_date_range(
    date_from: str | None,
    date_to: str | None,
    *,
    names: tuple[str, str] = ("date_from", "date_to"),
) -> tuple[Optional[date], Optional[date]]:
    """Validate optional YYYY-MM-DD bounds; start must not follow end."""
    bounds = []
    for name, raw in zip(names, (date_from, date_to)):
        if not raw:
            bounds.append(None)
            continue
        parsed = parse_iso_date(raw)
        if parsed is None:
            raise InvalidOptionError(f"{name} must be a YYYY-MM-DD date (got {raw!r})",
                                     **{name: raw})
        bounds.append(parsed)
    start, end = bounds
    if start and end and start > end:
        raise InvalidOptionError(f"{names[0]} must not be after {names[1]}",
                                 **{names[0]: date_from, names[1]: date_to})
    return start, end


def filter_by_date_range(
    rows: list,
    row_date: Callable[[object], Optional[date]],
    start: date | None,
    end: date | None,
) -> list:
    """
    Keep rows whose date lies in [start, end].  Rows without a usable
    date are kept so the validator can report them.
    """
    kept = []
    for row in rows:
        day = row_date(row)
        if day is not None:
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
        kept.append(row)
    return kept


def generate_import_id(prefix: str = "import") -> str:
    """e.g. import_20240115093000_1a2b3c4d"""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{prefix}_{stamp}_{uuid.uuid4().hex[:8]}"
