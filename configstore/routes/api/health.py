import logging

from flask import Blueprint, jsonify

from ...db import get_store

bp = Blueprint("api_health", __name__)
log = logging.getLogger(__name__)


@bp.get("/health")
def health():
    try:
        documents = get_store().describe()
        return jsonify(
            {
                "status": "healthy",
                "database": "connected",
                "documents": len(documents),
            }
        )
    except Exception:
        log.exception("Health check failed")
        return jsonify({"status": "unhealthy", "database": "disconnected"}), 503
