"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from eventlog.config import settings
from eventlog.database import Base, engine
from eventlog.errors import EventLogError
from eventlog.time_utils import utcnow

# Import routers
from eventlog.routers import auth, users, tags, events, search

# Import all models so Base.metadata knows about them
from eventlog.models.user import User                          # noqa: F401
from eventlog.models.tag import Tag                            # noqa: F401
from eventlog.models.event import Event                        # noqa: F401
from eventlog.models.attachment import Attachment              # noqa: F401
from eventlog.models.event_edit_history import EventEditHistory  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Log",
    description="Manual event log: record, tag, assign and search team activity",
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


def _error_body(request: Request, code: str, message: str, details=None) -> dict:
    return {
        "error": {"code": code, "message": message, "details": details},
        "timestamp": utcnow().isoformat(),
        "path": request.url.path,
    }


@app.exception_handler(EventLogError)
async def event_log_error_handler(request: Request, exc: EventLogError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(_error_body(request, exc.code, exc.message, exc.details)),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(_error_body(request, "VALIDATION_ERROR", "Invalid request data", exc.errors())),
    )


# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(tags.router, prefix="/api/tags", tags=["Tags"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(search.router, prefix="/api/search", tags=["Search"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
