# setukpa/api/v1/endpoints/health.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from setukpa.core.config import settings
from setukpa.db.session import get_db
from setukpa.workers.queue import get_queue, get_redis_connection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/live")
def liveness_probe():
    return {"status": "ok", "service": settings.PROJECT_NAME}


@router.get("/ready")
def readiness_probe(db: Session = Depends(get_db)):
    """
    Database is required. Redis only carries notifications, so a Redis
    outage reports "degraded" without failing the probe.
    """
    checks = {}
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Readiness: database unreachable: {e}")
        return JSONResponse(status_code=503, content={"status": "down", "checks": {"database": "error"}})

    try:
        get_redis_connection().ping()
        checks["notification_queue"] = len(get_queue(settings.NOTIFICATION_QUEUE))
    except RedisError as e:
        logger.warning(f"Readiness: redis unreachable: {e}")
        checks["notification_queue"] = "error"

    degraded = checks["notification_queue"] == "error"
    return {"status": "degraded" if degraded else "ok", "checks": checks}
