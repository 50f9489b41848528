"""
api.routes_import - CSV upload endpoints for prices and news.

Both take multipart/form-data with the CSV in field 'file' and return
the ImportResult.  Fatal import errors roll back and surface through
api.errors.
"""

from api import api_bp
from api.errors import success
from api.params import form_value, read_csv_upload, stock_code_arg
from db import get_session
from services.import_service import import_news, import_prices


@api_bp.route("/stocks/<stock_code>/import/csv", methods=["POST"])
def import_price_csv(stock_code: str):
    """
    POST /api/v1/stocks/{code}/import/csv

    Form fields: file, duplicate_strategy=skip|overwrite (default skip).
    """
    code = stock_code_arg(stock_code)
    content = read_csv_upload()
    strategy = form_value("duplicate_strategy", "skip")

    session = get_session()
    try:
        result = import_prices(session, code, content, strategy)
        session.commit()
        return success(result.to_dict())
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@api_bp.route("/stocks/<stock_code>/news/import/csv", methods=["POST"])
def import_news_csv(stock_code: str):
    """
    POST /api/v1/stocks/{code}/news/import/csv

    Form fields: file, duplicate_strategy, date_from, date_to
    (YYYY-MM-DD, optional; only news published in that window is kept).
    """
    code = stock_code_arg(stock_code)
    content = read_csv_upload()

    session = get_session()
    try:
        result = import_news(
            session, code, content,
            duplicate_strategy=form_value("duplicate_strategy", "skip"),
            date_from=form_value("date_from"),
            date_to=form_value("date_to"),
        )
        session.commit()
        return success(result.to_dict())
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
