"""
Core routes: health check.
"""

import logging
from datetime import datetime, timezone

from flask import jsonify

from novaplayer.routes import main

logger = logging.getLogger(__name__)


@main.route("/health")
def health():
    """Health check endpoint for Docker and monitoring."""
    from novaplayer import is_db_available

    db_healthy = is_db_available()
    overall_status = "healthy" if db_healthy else "degraded"

    return (
        jsonify({
            "status": overall_status,
            "timestamp": datetime.now(
                timezone.utc
            ).isoformat(),
        }),
        200,
    )
