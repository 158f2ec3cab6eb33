from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import helpdesk.db.base  # noqa: F401
from helpdesk.auth.routes import auth
from helpdesk.categories.routes import categories
from helpdesk.core.config import settings
from helpdesk.core.exceptions import register_exception_handlers
from helpdesk.core.log_config import RequestLoggingMiddleware, setup_logging
from helpdesk.core.rate_limit import limiter
from helpdesk.db.session import SessionLocal
from helpdesk.employees.routes import employees
from helpdesk.rbac.routes import roles
from helpdesk.tickets.routes import tickets

setup_logging()
logger = structlog.get_logger(__name__)


def _database_status() -> str:
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            return "healthy"
        finally:
            db.close()
    except SQLAlchemyError:
        return "unhealthy"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    status = _database_status()
    if status == "healthy":
        logger.info("database_connected")
    else:
        logger.error("database_connection_failed")

    yield

    logger.info("shutting_down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Complaint ticketing and role-based permission API for the campus platform",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(auth.router, prefix=settings.API_V1_PREFIX, tags=["authentication"])
app.include_router(tickets.router, prefix=settings.API_V1_PREFIX, tags=["tickets"])
app.include_router(categories.router, prefix=settings.API_V1_PREFIX, tags=["categories"])
app.include_router(roles.router, prefix=settings.API_V1_PREFIX, tags=["roles"])
app.include_router(employees.router, prefix=settings.API_V1_PREFIX, tags=["employees"])


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": settings.PROJECT_NAME, "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health_check() -> dict[str, str]:
    db_status = _database_status()
    overall = "healthy" if db_status == "healthy" else "degraded"
    return {"status": overall, "database": db_status}
