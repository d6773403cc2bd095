"""Compliance tracking API — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from compliance import __version__
from compliance.config import settings
from compliance.database import Base, SessionLocal, engine
from compliance.exceptions import ComplianceError
from compliance.middleware.auth import hash_password
from compliance.middleware.rate_limit import limiter
import compliance.models  # noqa: F401  registers every model on Base.metadata
from compliance.models.user import User
from compliance.routers import auth, conventions, documents, enterprises, indicators, users, visits

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the bootstrap admin before serving."""
    Base.metadata.create_all(bind=engine)
    ensure_bootstrap_admin()
    yield


app = FastAPI(
    title="Compliance Tracker",
    description="Enterprises, conventions, KPIs and documents for inspection authorities.",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

# Routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(enterprises.router)
app.include_router(documents.router)
app.include_router(indicators.router)
app.include_router(conventions.router)
app.include_router(visits.router)


@app.exception_handler(ComplianceError)
async def compliance_error_handler(request: Request, exc: ComplianceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.EXPOSE_ERROR_DETAILS else "Internal server error"
    return JSONResponse(status_code=500, content={"message": message})


def ensure_bootstrap_admin() -> None:
    """Create the configured admin account if it doesn't exist yet."""
    if not (settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == settings.BOOTSTRAP_ADMIN_EMAIL).first()
        if existing:
            return
        db.add(User(
            name=settings.BOOTSTRAP_ADMIN_NAME,
            email=settings.BOOTSTRAP_ADMIN_EMAIL,
            password_hash=hash_password(settings.BOOTSTRAP_ADMIN_PASSWORD),
            role="admin",
        ))
        db.commit()
        logger.info("Bootstrap admin %s created", settings.BOOTSTRAP_ADMIN_EMAIL)
    finally:
        db.close()


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}
