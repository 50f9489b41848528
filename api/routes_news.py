"""
api.routes_news - /api/v1/stocks/{code}/news endpoints.
"""

from flask import request

from api import api_bp
from api.errors import ApiError, success
from api.params import date_range_args, int_arg, stock_code_arg
from db import get_session
from import_engine import StockNotFoundError
from services.import_service import check_news_duplicates, delete_news_by_range
from services.news_service import NewsStore
from services.stock_service import StockService
import config


@api_bp.route("/stocks/<stock_code>/news")
def list_news(stock_code: str):
    """GET /api/v1/stocks/{code}/news?start_date=&end_date=&limit=&offset="""
    code = stock_code_arg(stock_code)
    start, end = date_range_args()
    limit = int_arg("limit", config.API_DEFAULT_LIMIT, minimum=1,
                    maximum=config.API_MAX_LIMIT)
    offset = int_arg("offset", 0)

    session = get_session()
    try:
        stock = StockService.get_by_code(session, code)
        if not stock:
            raise StockNotFoundError(code)
        news = NewsStore(session).list_range(stock.stock_id, start, end, limit, offset)
        return success({
            "stock_code": code,
            "news": [n.to_dict() for n in news],
            "total": len(news),
            "limit": limit,
            "offset": offset,
        })
    finally:
        session.close()


@api_bp.route("/stocks/<stock_code>/news", methods=["DELETE"])
def delete_news(stock_code: str):
    """DELETE /api/v1/stocks/{code}/news?start_date=&end_date="""
    code = stock_code_arg(stock_code)
    start = request.args.get("start_date", "").strip() or None
    end = request.args.get("end_date", "").strip() or None

    session = get_session()
    try:
        deleted = delete_news_by_range(session, code, start, end)
        session.commit()
        return success({
            "stock_code": code,
            "deleted_count": deleted,
            "date_range": {"start": start, "end": end},
        })
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@api_bp.route("/stocks/<stock_code>/news/check-duplicates", methods=["POST"])
def check_duplicates(stock_code: str):
    """
    POST /api/v1/stocks/{code}/news/check-duplicates

    JSON body: {"news": [{"published_at": ..., "title": ...}, ...]}
    """
    code = stock_code_arg(stock_code)
    data = request.get_json(silent=True) or {}
    candidates = data.get("news")
    if not isinstance(candidates, list) or not candidates:
        raise ApiError("VALIDATION_ERROR", "news must be a non-empty list", 400)
    for i, item in enumerate(candidates):
        if not isinstance(item, dict) or not item.get("published_at") or not item.get("title"):
            raise ApiError("VALIDATION_ERROR",
                           f"news[{i}] needs published_at and title", 400, index=i)

    session = get_session()
    try:
        result = check_news_duplicates(session, code, candidates)
        return success(result.to_dict())
    finally:
        session.close()
