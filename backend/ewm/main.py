"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ewm.config import settings
from ewm.database import Base, engine
from ewm.exceptions import DomainError
from ewm.timeutils import utcnow

# Import routers
from ewm.routers import users, categories, events, participation_requests

# Import all models so Base.metadata knows about them
from ewm.models.user import User                          # noqa: F401
from ewm.models.category import Category                  # noqa: F401
from ewm.models.event import Event                        # noqa: F401
from ewm.models.request import ParticipationRequest       # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Explore With Me",
    description="Event platform backend: event moderation and capacity-limited participation requests",
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


@app.exception_handler(DomainError)
def handle_domain_error(request: Request, exc: DomainError):
    """Map domain errors to their HTTP status with an ApiError-style body."""
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": exc.code.value,
            "reason": exc.reason,
            "message": exc.message,
            "timestamp": utcnow().isoformat(),
        },
    )


# Register routers
app.include_router(users.router, prefix="/admin/users", tags=["Admin: Users"])
app.include_router(categories.admin_router, prefix="/admin/categories", tags=["Admin: Categories"])
app.include_router(categories.public_router, prefix="/categories", tags=["Categories"])
app.include_router(events.private_router, prefix="/users/{user_id}/events", tags=["Private: Events"])
app.include_router(events.admin_router, prefix="/admin/events", tags=["Admin: Events"])
app.include_router(events.public_router, prefix="/events", tags=["Events"])
app.include_router(
    participation_requests.router, prefix="/users/{user_id}/requests", tags=["Private: Requests"]
)
app.include_router(
    participation_requests.event_router,
    prefix="/users/{user_id}/events/{event_id}/requests",
    tags=["Private: Requests"],
)
app.include_router(
    participation_requests.admin_router,
    prefix="/admin/events/{event_id}/requests",
    tags=["Admin: Requests"],
)


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
