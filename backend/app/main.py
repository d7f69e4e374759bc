"""A3 Workspace — FastAPI Application Entry Point."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app import models  # noqa: F401  (registers every table on Base.metadata)
from app.config import settings
from app.database import engine, Base
from app.errors import OperationError
from app.logging_config import configure_logging
from app.middleware.rate_limit import limiter
from app.routers import auth, organizations, a3, comments

configure_logging()
logger = logging.getLogger(__name__)

# Create all tables on startup
Base.metadata.create_all(bind=engine)

# ── CORS origins from env (supports dev localhost + production domain) ──────
_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="A3 Workspace",
    description="A3 documents with department-scoped access, comments, and an audit trail.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Rate limiting
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """429 with the same body shape as every other error."""
    logger.info("Rate limit exceeded for %s %s", request.method, request.url.path)
    response = JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


@app.exception_handler(OperationError)
async def operation_error_handler(request: Request, exc: OperationError):
    """Map service-layer errors to their status code with a bare detail message."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(organizations.router)
app.include_router(a3.router)
app.include_router(comments.router)


@app.get("/")
def root():
    return {
        "name": "A3 Workspace API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "ok"}
