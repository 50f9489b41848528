"""
StockDB - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path

import dotenv


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR        = Path(__file__).resolve().parent

# Load .env from the repo root before reading anything else
dotenv.load_dotenv(BASE_DIR / ".env")

PRICE_SEED_PATH = os.environ.get("STOCKDB_PRICE_SEED", "")

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("STOCKDB_DB", f"sqlite:///{BASE_DIR / 'stockdb.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("STOCKDB_HOST", "0.0.0.0")
PORT   = int(os.environ.get("STOCKDB_PORT", "3000"))
DEBUG  = os.environ.get("STOCKDB_DEBUG", "0") == "1"
SECRET = os.environ.get("STOCKDB_SECRET", "stockdb-dev-key-change-in-prod")
MAX_UPLOAD_MB = int(os.environ.get("STOCKDB_MAX_UPLOAD_MB", "10"))

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL  = os.environ.get("STOCKDB_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# ── Market ─────────────────────────────────────────────────────────────
# Naive news timestamps are wall-clock time at this UTC offset (JST)
MARKET_UTC_OFFSET = int(os.environ.get("STOCKDB_MARKET_UTC_OFFSET", "9"))

# Sample stock registered on an empty database
SEED_STOCK_CODE = "7203"
SEED_STOCK_NAME = "トヨタ自動車"

# ── Pagination ─────────────────────────────────────────────────────────
API_MAX_LIMIT     = 1000
API_DEFAULT_LIMIT = 100
