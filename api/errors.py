"""
api.errors - JSON error bodies and error handlers for the API blueprint.

Every failure leaves the API as

    {"success": false, "error": {"code", "message", "details"?}}
"""

from __future__ import annotations

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from api import api_bp
from import_engine import ErrorKind, ImportEngineError, InvalidOptionError
from services.stock_service import StockCodeDuplicateError

logger = logging.getLogger(__name__)

# HTTP status → error code for aborts that carry no domain meaning
_HTTP_CODES = {
    400: "VALIDATION_ERROR",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "FILE_TOO_LARGE",
    415: "UNSUPPORTED_FILE_TYPE",
}


class ApiError(Exception):
    """Request-level failure raised from route helpers."""

    def __init__(self, code: str, message: str, status: int = 400, **details):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.details = details


def error_response(code: str, message: str, status: int, details: dict | None = None):
    body = {"code": code, "message": message}
    if details:
        body["details"] = details
    return jsonify({"success": False, "error": body}), status


def success(data, status: int = 200):
    return jsonify({"success": True, "data": data}), status


@api_bp.errorhandler(ApiError)
def api_request_error(exc: ApiError):
    return error_response(exc.code, exc.message, exc.status, exc.details)


@api_bp.errorhandler(ImportEngineError)
def api_import_error(exc: ImportEngineError):
    if exc.kind is ErrorKind.NOT_FOUND:
        return error_response("STOCK_NOT_FOUND", exc.message, 404, exc.details)
    if isinstance(exc, InvalidOptionError):
        return error_response("VALIDATION_ERROR", exc.message, 400, exc.details)
    if exc.kind is ErrorKind.BAD_FORMAT:
        return error_response("INVALID_CSV_FORMAT", exc.message, 400, exc.details)
    logger.error(f"Unhandled import error: {exc}")
    return error_response("INTERNAL_SERVER_ERROR", exc.message, 500)


@api_bp.errorhandler(StockCodeDuplicateError)
def api_duplicate_stock(exc: StockCodeDuplicateError):
    return error_response("STOCK_CODE_DUPLICATE", str(exc), 409,
                          {"stock_code": exc.stock_code})


@api_bp.errorhandler(HTTPException)
def api_http_error(exc: HTTPException):
    code = _HTTP_CODES.get(exc.code, "HTTP_ERROR")
    return error_response(code, exc.description or exc.name, exc.code)


@api_bp.errorhandler(Exception)
def api_server_error(exc: Exception):
    logger.exception(f"Unexpected error: {exc}")
    return error_response("INTERNAL_SERVER_ERROR", "internal server error", 500)
