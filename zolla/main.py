import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from zolla.api.v1.health import router as health_router
from zolla.api.v1.analysis import router as analysis_router
from zolla.api.v1.wizard import router as wizard_router
from zolla.api.v1.account import router as account_router
from zolla.api.v1.premium import router as premium_router
from zolla.core.rate_limit import limiter
from zolla.core.config import settings
from zolla.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Zolla Resume Analysis API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=(settings.cors_allow_origin_regex or "").strip() or None,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(analysis_router, prefix="/v1", tags=["Analysis"])
app.include_router(wizard_router, prefix="/v1", tags=["Wizard"])
app.include_router(account_router, prefix="/v1", tags=["Account"])
app.include_router(premium_router, prefix="/v1", tags=["Premium"])
