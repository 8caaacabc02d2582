# backend/sweetshop/routes/system.py
"""
System health endpoint.

Reports database connectivity and whether the document directory and the
messaging channel are usable, so a deployment can be checked without
logging in.
"""

import os
import time
from flask import Blueprint, current_app
from sqlalchemy import func, select

from ..extensions import db
from ..models import InventoryItem, SessionToken
from ..services.notification_service import WhatsAppSettings
from sweetshop.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        item_count = db.session.execute(select(func.count()).select_from(InventoryItem)).scalar()
        active_sessions = db.session.execute(
            select(func.count()).select_from(SessionToken).where(
                SessionToken.is_revoked.is_(False),
                SessionToken.expires_at >= utcnow(),
            )
        ).scalar()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "inventory_items": item_count,
                "active_sessions": active_sessions,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_documents_health() -> dict:
    documents_dir = current_app.config["DOCUMENTS_DIR"]
    try:
        os.makedirs(documents_dir, exist_ok=True)
    except OSError:
        current_app.logger.exception("Documents directory is not usable")
        return {"status": "degraded", "warning": "Documents directory is not writable"}
    if not os.access(documents_dir, os.W_OK):
        return {"status": "degraded", "warning": "Documents directory is not writable"}
    return {"status": "healthy"}


def check_messaging_health() -> dict:
    """Unconfigured messaging is degraded, not down: orders still work."""
    settings = WhatsAppSettings.from_config(current_app.config)
    if not settings.enabled:
        return {"status": "degraded", "warning": "WhatsApp credentials not configured"}
    return {"status": "healthy"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    start_time = time.time()

    checks = {
        "database": check_database_health(),
        "documents": check_documents_health(),
        "messaging": check_messaging_health(),
    }

    statuses = [c["status"] for c in checks.values()]
    if "unhealthy" in statuses:
        overall_status, http_status = "unhealthy", 503
    elif "degraded" in statuses:
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": checks,
    }, http_status
