# setukpa/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from setukpa.core.config import settings
from setukpa.core.exceptions import SetukpaError
from setukpa.core.logging_config import setup_logging
from setukpa.db.base import Base
from setukpa.db.session import engine
from setukpa.api.v1.endpoints import (
    assignments,
    auth,
    grades,
    health,
    notifications,
    papers,
    users,
)
from setukpa import models  # noqa

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SetukpaError)
async def setukpa_error_handler(request: Request, exc: SetukpaError):
    logger.info(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)


app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/v1")
app.include_router(assignments.router, prefix="/api/v1")
app.include_router(papers.router, prefix="/api/v1")
app.include_router(grades.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1/health")
