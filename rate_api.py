"""
rate_api.py
Internal rate-refresh endpoint (for a scheduler / cron).
Run: flask --app rate_api run
"""

from __future__ import annotations

import hmac
import logging

from flask import Flask, jsonify, request

import config
import rates

logger = logging.getLogger(__name__)


def _authorized(header: str, secret: str) -> bool:
    if not secret:
        return True
    return hmac.compare_digest(header.encode("utf-8"), f"Bearer {secret}".encode("utf-8"))


def create_app(cron_secret: str | None = None, api_key: str | None = None) -> Flask:
    app = Flask(__name__)
    app.config["CRON_SECRET"] = config.CRON_SECRET if cron_secret is None else cron_secret
    app.config["CURRENCYAPI_KEY"] = config.CURRENCYAPI_KEY if api_key is None else api_key

    @app.get("/api/rates")
    def latest_rate():
        if not _authorized(request.headers.get("Authorization", ""), app.config["CRON_SECRET"]):
            return jsonify(ok=False, error="unauthorized"), 401

        key = app.config["CURRENCYAPI_KEY"]
        if not key:
            return jsonify(ok=False, error="missing currencyapi key"), 400

        try:
            rate = rates.fetch_jod_ils_rate(key)
        except rates.RateFetchError as e:
            logger.error("Rate refresh failed: %s", e)
            return jsonify(ok=False, error=str(e)), 500
        return jsonify(ok=True, rate=rate), 200

    return app


if __name__ == "__main__":
    create_app().run()
