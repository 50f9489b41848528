"""
import_engine - CSV import pipeline for daily prices and news.

Public API:
    CsvImporter(fmt, directory, store).import_csv(code, content, options)
        → ImportResult
    PRICE_FORMAT / NEWS_FORMAT
    ImportOptions, ImportResult, ImportErrorDetail, DuplicateCheckResult
    ErrorKind and the ImportEngineError family
"""

from import_engine.errors import (                          # noqa: F401
    EmptyInputError,
    ErrorKind,
    HeaderFormatError,
    ImportEngineError,
    InvalidOptionError,
    RowParseError,
    StockNotFoundError,
)
from import_engine.formats import CsvFormat, NEWS_FORMAT, PRICE_FORMAT      # noqa: F401
from import_engine.importer import CsvImporter, ImportOptions              # noqa: F401
from import_engine.report import (                          # noqa: F401
    DuplicateCheckResult,
    ImportErrorDetail,
    ImportResult,
)
from import_engine.row_processor import NewsRow, PriceRow   # noqa: F401
