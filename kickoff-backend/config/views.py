"""
Health check views for monitoring and load balancers
"""
import logging

from django.db import connection
from django.http import JsonResponse

from utils.redis_client import get_redis

logger = logging.getLogger(__name__)

SERVICE_NAME = "kickoff-backend"


def _check_database():
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        return {"status": "connected", "error": None}
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return {"status": "disconnected", "error": str(e)}


def _check_redis():
    try:
        get_redis().ping()
        return {"status": "connected", "error": None}
    except Exception as e:
        return {"status": "disconnected", "error": str(e)}


def _check_celery_worker():
    try:
        from config.celery import app
        active_workers = app.control.inspect(timeout=2).active()
        if active_workers:
            return {"status": "running", "worker_count": len(active_workers), "error": None}
        return {"status": "not_running", "worker_count": 0, "error": "No active workers found"}
    except Exception as e:
        return {"status": "unknown", "worker_count": 0, "error": str(e)}


def healthz(request):
    """
    Liveness: 200 while the database answers, 500 otherwise.
    """
    db_check = _check_database()
    if db_check["status"] == "connected":
        return JsonResponse({
            "status": "healthy",
            "service": SERVICE_NAME,
            "database": db_check["status"],
        }, status=200)
    return JsonResponse({
        "status": "unhealthy",
        "service": SERVICE_NAME,
        "database": db_check["status"],
        "error": db_check["error"],
    }, status=500)


def readyz(request):
    """
    Readiness: database, Redis (locks, channel layer, broker) and a Celery
    worker must all be reachable. Returns 503 otherwise.
    """
    db_check = _check_database()
    redis_check = _check_redis()
    worker_check = _check_celery_worker()

    all_ready = (
        db_check["status"] == "connected"
        and redis_check["status"] == "connected"
        and worker_check["status"] == "running"
    )
    response_data = {
        "status": "ready" if all_ready else "not_ready",
        "service": SERVICE_NAME,
        "checks": {
            "database": db_check["status"],
            "redis": redis_check["status"],
            "celery_worker": {
                "status": worker_check["status"],
                "worker_count": worker_check["worker_count"],
            },
        },
    }
    errors = {
        name: check["error"]
        for name, check in (("database", db_check), ("redis", redis_check), ("celery_worker", worker_check))
        if check["error"]
    }
    if errors:
        response_data["errors"] = errors
    return JsonResponse(response_data, status=200 if all_ready else 503)
