"""
import_engine.errors - Error taxonomy for the import pipeline.

Fatal errors are raised and abort the whole import before anything is
written.  Each carries an explicit ErrorKind so callers branch on
structure instead of message text.  Row-scoped problems are never
raised; they travel as ImportErrorDetail values inside ImportResult.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND          = "not_found"
    BAD_FORMAT         = "bad_format"
    VALIDATION_FAILED  = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"


class ImportEngineError(Exception):
    """Base class for every fatal import error."""

    kind: ErrorKind = ErrorKind.BAD_FORMAT

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }


class StockNotFoundError(ImportEngineError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, stock_code: str):
        super().__init__(f"stock code {stock_code} not found",
                         stock_code=stock_code)
        self.stock_code = stock_code


class EmptyInputError(ImportEngineError):
    def __init__(self):
        super().__init__("CSV file is empty")


class HeaderFormatError(ImportEngineError):
    """
    Header row does not match the expected column list.

    column is the 1-based index of the first mismatching column, or
    None when the column count itself is wrong.
    """

    def __init__(self, expected: list[str], actual: list[str],
                 column: int | None = None):
        if column is None:
            message = (f"CSV header has {len(actual)} columns, "
                       f"expected {len(expected)}")
        else:
            message = (f"CSV header column {column} must be "
                       f"'{expected[column - 1]}' (got '{actual[column - 1]}')")
        super().__init__(message, expected=list(expected),
                         actual=list(actual), column=column)
        self.expected = list(expected)
        self.actual = list(actual)
        self.column = column


class RowParseError(ImportEngineError):
    """A data line could not be turned into a typed row."""

    def __init__(self, line: int, reason: str):
        super().__init__(f"line {line}: {reason}", line=line, reason=reason)
        self.line = line
        self.reason = reason


class InvalidOptionError(ImportEngineError):
    """Bad import option (strategy name, date range)."""
