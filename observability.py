"""
Liberation Engine — Observability
Covers: logging setup, Sentry error tracking, backend health checks.
"""
import logging
import os
from datetime import datetime, timezone

from flask import Blueprint, jsonify

# ── Sentry: error tracking ──
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

from liberation_engine import get_flags

SERVICE_VERSION = os.getenv("LIBERATION_VERSION", "1.0.0")

health_bp = Blueprint("health", __name__)


def init_observability(app):
    """Initialize logging and error tracking. Call once at app startup."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    sentry_dsn = os.getenv("SENTRY_DSN")
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_RATE", "0.1")),
            environment=os.getenv("ENVIRONMENT", "production"),
            release=SERVICE_VERSION,
        )
        logging.getLogger("observability").info("Sentry initialized")

    app.register_blueprint(health_bp)


@health_bp.route("/health/detailed")
def detailed_health():
    """Health of the configured history backend."""
    flags = get_flags()
    checks = {"history_backend": {"status": "ok", "backend": flags["HISTORY_BACKEND"]}}

    if flags["HISTORY_BACKEND"] == "redis":
        try:
            import redis as redis_lib
            r = redis_lib.from_url(flags["REDIS_URL"])
            r.ping()
            checks["redis"] = {"status": "ok"}
        except Exception:
            checks["redis"] = {"status": "unavailable"}

    overall = "ok" if all(c["status"] == "ok" for c in checks.values()) else "degraded"
    return jsonify({"status": overall, "checks": checks, "timestamp": datetime.now(timezone.utc).isoformat()})
