# backend/ppe_tracker/routes/system.py
"""
System health and version endpoints.

Health covers the database and the notification channel; version reports
what is deployed.
"""

import sys
import time

from flask import Blueprint, current_app

from ..extensions import db
from ..models import PpeItem, IssueVoucher, LoanTransaction
from ..services.notification_service import get_notifier
from ppe_tracker.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        item_count = db.session.query(PpeItem).count()
        voucher_count = db.session.query(IssueVoucher).count()
        loan_count = db.session.query(LoanTransaction).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "items": item_count,
                "vouchers": voucher_count,
                "loans": loan_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_notification_health() -> dict:
    """
    Report whether LINE push is configured. Does not call LINE.

    An unconfigured channel is degraded, not unhealthy: confirmations still
    succeed without notifications.
    """
    notifier = get_notifier()
    admin_recipient = bool(current_app.config.get("ADMIN_LINE_USER_ID"))

    if notifier.is_configured and admin_recipient:
        return {"status": "healthy"}

    missing = []
    if not notifier.is_configured:
        missing.append("LINE_CHANNEL_ACCESS_TOKEN")
    if not admin_recipient:
        missing.append("ADMIN_LINE_USER_ID")
    return {"status": "degraded", "warning": f"Missing settings: {', '.join(missing)}"}


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    notification_health = check_notification_health()

    all_checks = [database_health, notification_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status = "unhealthy"
        http_status = 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "notifications": notification_health,
        }
    }

    return response, http_status


@system_bp.get("/version")
def version():
    """
    Version endpoint for deployment debugging.

    Does NOT expose secret keys, tokens, or database credentials.
    """
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": current_app.config.get("API_VERSION"),
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
