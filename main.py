#!/usr/bin/env python3
"""
StockDB - Stock price and news database backend
================================================

Single-command run:  python main.py

See config.py for all environment-variable tunables.
"""

import atexit
import logging
import os
from datetime import datetime, timezone

from flask import Flask, jsonify

import config
from db import Stock, check_connection, dispose_db, get_session, init_db
from api import api_bp


def create_app(db_url: str | None = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.secret_key = config.SECRET
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_MB * 1024 * 1024
    app.json.ensure_ascii = False

    # ── Initialise database ─────────────────────────────────────────
    init_db(db_url or config.DB_URL)

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    # ── Health checks ───────────────────────────────────────────────
    @app.route("/health")
    def health():
        return jsonify({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @app.route("/health/db")
    def health_db():
        if check_connection():
            return jsonify({"status": "ok", "database": "connected"})
        return jsonify({"status": "error", "database": "disconnected"}), 503

    # ── Error handlers ──────────────────────────────────────────────
    @app.errorhandler(404)
    def _404(e):
        return jsonify({"success": False,
                        "error": {"code": "NOT_FOUND", "message": "not found"}}), 404

    @app.errorhandler(413)
    def _413(e):
        return jsonify({"success": False, "error": {
            "code": "FILE_TOO_LARGE",
            "message": f"upload exceeds {config.MAX_UPLOAD_MB} MB",
        }}), 413

    @app.errorhandler(500)
    def _500(e):
        return jsonify({"success": False, "error": {
            "code": "INTERNAL_SERVER_ERROR", "message": "internal server error",
        }}), 500

    return app


def _seed_if_empty():
    """Register the sample stock and import seed prices on an empty database."""
    session = get_session()
    try:
        count = session.query(Stock).count()
        if count > 0:
            print(f"\n  Database has {count} stocks.")
            return

        from services.stock_service import StockService
        StockService.create(session, config.SEED_STOCK_CODE, config.SEED_STOCK_NAME)
        session.commit()
        print(f"\n  Registered sample stock {config.SEED_STOCK_CODE} "
              f"{config.SEED_STOCK_NAME}")

        if not config.PRICE_SEED_PATH:
            return
        if not os.path.exists(config.PRICE_SEED_PATH):
            print(f"  No seed CSV at {config.PRICE_SEED_PATH} - no prices imported.")
            return
        with open(config.PRICE_SEED_PATH, "rb") as fh:
            content = fh.read()

        print(f"  Importing seed prices from {config.PRICE_SEED_PATH} …")
        from services.import_service import import_prices
        result = import_prices(session, config.SEED_STOCK_CODE, content)
        session.commit()

        print(f"  Done: {result.success_count} imported, "
              f"{result.skip_count} skipped / {result.total_rows} rows")
        if result.errors:
            print("  First errors (max 10):")
            for err in result.errors[:10]:
                print(f"    Row {err.row}: {err.message}")
    finally:
        session.close()


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    print("=" * 56)
    print("  StockDB - Stock price & news database")
    print("=" * 56)

    app = create_app()
    atexit.register(dispose_db)
    _seed_if_empty()

    print(f"\n  http://{config.HOST}:{config.PORT}/api/v1/stocks")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
