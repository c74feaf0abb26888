import logging
import sqlite3

from fastapi import APIRouter

from zolla.ai.config import load_ai_config
from zolla.storage.db import connect

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Health Check", description="Check the database and AI provider configuration.")
async def health_check():
    database = "ok"
    try:
        with connect() as conn:
            conn.execute("SELECT 1")
    except sqlite3.Error as exc:
        logger.warning("health_database_error: %s", exc)
        database = "unavailable"
    cfg = load_ai_config()
    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "ai_provider": cfg.provider,
        "ai_model": cfg.model,
    }
