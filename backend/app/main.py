"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import Base, SessionLocal, engine
from app.errors import ModerationError, StoreError, ValidationError

# Import routers
from app.routers import admins, events
from app.services.admin_service import ensure_bootstrap_superadmin

# Import all models so Base.metadata knows about them
from app.models.admin import Admin                    # noqa: F401
from app.models.event import Event                    # noqa: F401
from app.models.event_mutation import EventMutation   # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Moderation",
    description="Event publishing with super-admin review of submissions, edits and deletions",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(admins.router, prefix="/api/admin", tags=["Admins"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])


@app.exception_handler(ModerationError)
async def handle_moderation_error(request: Request, exc: ModerationError):
    body = {"error": exc.message, "code": exc.code}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    err = StoreError()
    return JSONResponse(status_code=err.status_code, content={"error": err.message, "code": err.code})


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode) and seed the super-admin."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        admin = ensure_bootstrap_superadmin(db)
        if admin:
            logger.info("Bootstrap super-admin available: %s", admin.username)
    finally:
        db.close()


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
