"""
Health Status

Availability of the record backend and the background task system.
"""

from flask import Flask

from sealdrop.config.redis_config import redis_health_check


def get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Redis is only checked when it backs the record store.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "backend": app.share_config.record_backend,
        "redis": "not_configured",
        "celery": "unknown",
    }

    if app.share_config.record_backend == "redis":
        try:
            if redis_health_check():
                health_status["redis"] = "connected"
            else:
                health_status["redis"] = "disconnected"
                health_status["status"] = "degraded"
        except Exception as e:
            health_status["redis"] = f"error: {e.__class__.__name__}"
            health_status["status"] = "degraded"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    if getattr(app, "container", None) is None:
        health_status["status"] = "degraded"
        health_status["message"] = "services not initialized"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
