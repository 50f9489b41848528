"""
db - Database layer.

Public API:
    init_db()       → create engine + tables
    dispose_db()    → release the engine at shutdown
    get_session()   → new Session
    Stock, StockPrice, News → ORM models
"""

from db.engine import init_db, dispose_db, get_session, check_connection   # noqa: F401
from db.models import Base, Stock, StockPrice, News                        # noqa: F401
