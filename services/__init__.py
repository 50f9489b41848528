"""
services - Business-logic layer sitting between API and DB.
"""

from services.stock_service import (                        # noqa: F401
    StockCodeDuplicateError,
    StockDirectory,
    StockService,
)
from services.price_service import PriceStore               # noqa: F401
from services.news_service import NewsStore                 # noqa: F401
