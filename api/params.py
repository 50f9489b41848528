"""
api.params - Query-string and upload helpers shared by the route modules.

Helpers raise api.errors.ApiError (or InvalidOptionError for date
bounds) which the blueprint's error handlers turn into JSON.
"""

from __future__ import annotations

from datetime import date

from flask import request

from api.errors import ApiError
from import_engine.importer import parse_date_range
from services.stock_service import STOCK_CODE_RE

CSV_MIMETYPES = ("text/csv", "application/csv", "application/vnd.ms-excel",
                 "text/plain", "application/octet-stream")


def stock_code_arg(stock_code: str) -> str:
    if not STOCK_CODE_RE.fullmatch(stock_code or ""):
        raise ApiError("VALIDATION_ERROR", "stock code must be 4 letters or digits",
                       stock_code=stock_code)
    return stock_code.upper()


def int_arg(name: str, default: int, *, minimum: int = 0, maximum: int | None = None) -> int:
    raw = request.args.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ApiError("VALIDATION_ERROR", f"{name} must be an integer", **{name: raw})
    if value < minimum:
        raise ApiError("VALIDATION_ERROR", f"{name} must be at least {minimum}",
                       **{name: raw})
    if maximum is not None:
        value = min(value, maximum)
    return value


def date_range_args() -> tuple[date | None, date | None]:
    """?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD, both optional."""
    return parse_date_range(
        request.args.get("start_date", "").strip() or None,
        request.args.get("end_date", "").strip() or None,
        names=("start_date", "end_date"),
    )


def read_csv_upload(field: str = "file") -> bytes:
    """Return the uploaded CSV bytes from multipart field *field*."""
    upload = request.files.get(field)
    if upload is None or not upload.filename:
        raise ApiError("FILE_REQUIRED", "a CSV file is required", 400)

    mimetype = (upload.mimetype or "").lower()
    if not upload.filename.lower().endswith(".csv") and mimetype not in CSV_MIMETYPES:
        raise ApiError("UNSUPPORTED_FILE_TYPE", "only CSV files are supported", 415,
                       filename=upload.filename, mimetype=mimetype)
    return upload.read()


def form_value(name: str, default: str | None = None) -> str | None:
    value = request.form.get(name, "").strip()
    return value or default
