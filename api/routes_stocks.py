"""
api.routes_stocks - /api/v1/stocks endpoints (stock master and prices).
"""

from flask import request

from api import api_bp
from api.errors import ApiError, success
from api.params import date_range_args, int_arg, stock_code_arg
from db import get_session
from import_engine import StockNotFoundError
from services.import_service import delete_prices_by_range
from services.price_service import PriceStore
from services.stock_service import StockService, validate_stock_input
import config


@api_bp.route("/stocks")
def list_stocks():
    """GET /api/v1/stocks"""
    session = get_session()
    try:
        stocks = StockService.list_all(session)
        return success({
            "stocks": [s.to_dict() for s in stocks],
            "total": len(stocks),
        })
    finally:
        session.close()


@api_bp.route("/stocks", methods=["POST"])
def create_stock():
    """
    POST /api/v1/stocks

    JSON body: {stock_code, stock_name}.  The code is stored upper-cased.
    """
    data = request.get_json(silent=True) or {}
    code = str(data.get("stock_code") or "")
    name = str(data.get("stock_name") or "")
    problem = validate_stock_input(code, name)
    if problem:
        raise ApiError("VALIDATION_ERROR", problem, 400)

    session = get_session()
    try:
        stock = StockService.create(session, code, name)
        session.commit()
        return success(stock.to_dict(), 201)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@api_bp.route("/stocks/id/<int:stock_id>")
def get_stock_by_id(stock_id: int):
    """GET /api/v1/stocks/id/{stock_id}"""
    session = get_session()
    try:
        stock = StockService.get(session, stock_id)
        if not stock:
            raise ApiError("STOCK_NOT_FOUND", f"stock id {stock_id} not found", 404,
                           stock_id=stock_id)
        return success(stock.to_dict())
    finally:
        session.close()


@api_bp.route("/stocks/<stock_code>")
def get_stock(stock_code: str):
    """GET /api/v1/stocks/{code}"""
    code = stock_code_arg(stock_code)
    session = get_session()
    try:
        stock = StockService.get_by_code(session, code)
        if not stock:
            raise StockNotFoundError(code)
        return success(stock.to_dict())
    finally:
        session.close()


# ── Prices ─────────────────────────────────────────────────────────────

@api_bp.route("/stocks/<stock_code>/prices")
def get_prices(stock_code: str):
    """
    GET /api/v1/stocks/{code}/prices?start_date=&end_date=&limit=

    Oldest first, for charting.
    """
    code = stock_code_arg(stock_code)
    start, end = date_range_args()
    limit = int_arg("limit", config.API_MAX_LIMIT, minimum=1,
                    maximum=config.API_MAX_LIMIT)

    session = get_session()
    try:
        stock = StockService.get_by_code(session, code)
        if not stock:
            raise StockNotFoundError(code)
        prices = PriceStore(session).list_range(stock.stock_id, start, end, limit)
        if not prices:
            raise ApiError("PRICE_DATA_NOT_FOUND", f"no price data for stock {code}",
                           404, stock_code=code)
        return success({
            "stock_code": code,
            "prices": [p.to_dict() for p in prices],
            "total": len(prices),
        })
    finally:
        session.close()


@api_bp.route("/stocks/<stock_code>/prices", methods=["DELETE"])
def delete_prices(stock_code: str):
    """DELETE /api/v1/stocks/{code}/prices?start_date=&end_date="""
    code = stock_code_arg(stock_code)
    start = request.args.get("start_date", "").strip() or None
    end = request.args.get("end_date", "").strip() or None

    session = get_session()
    try:
        deleted = delete_prices_by_range(session, code, start, end)
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
