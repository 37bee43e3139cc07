# backend/garments_tracker/routes/system.py
"""
Liveness, health and version endpoints.
"""

import sys
import time
from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db, IDENTITY_VERIFIER_KEY, PAYMENT_GATEWAY_KEY
from ..time_utils import utcnow, to_utc_z

API_VERSION = "1.0.0"

system_bp = Blueprint("system", __name__)


@system_bp.get("/")
def root():
    """Plain-text liveness probe."""
    return "Server is running just fine!", 200, {"Content-Type": "text/plain; charset=utf-8"}


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {"status": "unhealthy", "latency_ms": round(elapsed_ms, 2), "error": "Database error"}


@system_bp.get("/health")
def health():
    """
    Dependency health.

    Returns:
    - 200: database reachable (provider collaborators reported as configured or not)
    - 503: database unreachable
    """
    database_health = check_database_health()
    http_status = 200 if database_health["status"] == "healthy" else 503

    return {
        "status": database_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "database": database_health,
            "identity_provider": {"configured": current_app.extensions.get(IDENTITY_VERIFIER_KEY) is not None},
            "payment_provider": {"configured": current_app.extensions.get(PAYMENT_GATEWAY_KEY) is not None},
        },
    }, http_status


@system_bp.get("/version")
def version():
    """Non-sensitive deployment info. Never exposes keys, credentials or paths."""
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
