"""FastAPI entrypoint for the daily order window service."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from dailyorders.api.v1.api import api_router
from dailyorders.core.config import settings
from dailyorders.db import session as db_session
from dailyorders.db.base import Base
from dailyorders.db.seed import ensure_demo_store

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    if not settings.seed_demo_data:
        return
    with db_session.SessionLocal() as session:
        store_id = ensure_demo_store(session)
        logger.info("[BOOTSTRAP] demo store present: %s", store_id)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok", "env": settings.app_env}
