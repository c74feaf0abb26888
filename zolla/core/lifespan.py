from contextlib import asynccontextmanager
import logging

from zolla.ai.config import load_ai_config
from zolla.storage.db import get_db_path, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    init_db()
    cfg = load_ai_config()
    logger.info("startup db=%s ai_provider=%s ai_model=%s", get_db_path(), cfg.provider, cfg.model)
    yield
    logger.info("shutdown")
