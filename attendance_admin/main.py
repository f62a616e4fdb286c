# attendance_admin/main.py
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncpg
import logging

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config.config import settings
from .logging.logging_config import setup_logging
from .api import auth, students, teachers, attendance, dashboard, search
from .api.utilities.errors import GENERIC_ERROR_MESSAGE
from .api.utilities.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the shared PostgreSQL pool on startup and closes it on shutdown.
    Schema is not touched here; run `python -m attendance_admin.db.migrate` first.
    """
    setup_logging()
    logger.info("Application starting...")

    app.state.postgres_pool = None
    try:
        app.state.postgres_pool = await asyncpg.create_pool(
            dsn=settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
        )
        logger.info(f"PostgreSQL pool created (max {settings.DB_POOL_MAX_SIZE} connections).")
    except Exception as e:
        # Requests get a 503 from get_postgres_pool until the database is reachable on restart.
        logger.error(f"ERROR: could not create the PostgreSQL pool on startup: {e}", exc_info=True)

    yield

    logger.info("Application shutting down...")
    if getattr(app.state, "postgres_pool", None):
        await app.state.postgres_pool.close()
        logger.info("PostgreSQL pool closed.")


app = FastAPI(
    title="School Attendance Admin API",
    description="Students, teachers, attendance, CSV import/export and search for school administrators.",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and wrongly typed fields are plain 400s with the first problem spelled out."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything unexpected is logged in full and answered with a generic message."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": GENERIC_ERROR_MESSAGE})


app.include_router(auth.router, prefix="/api")
app.include_router(students.router, prefix="/api")
app.include_router(teachers.router, prefix="/api")
app.include_router(attendance.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(search.router, prefix="/api")


@app.get("/health", tags=["System"])
def health_check():
    """Liveness check."""
    return {"status": "ok", "message": "School Attendance Admin API is running."}
