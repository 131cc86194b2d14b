import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api import router as api_router
from app.api.core.config import settings
from app.api.core.exceptions import (
    HelpdeskError,
    general_exception_handler,
    helpdesk_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.api.core.logger import setup_logging
from app.api.db.database import AsyncSessionLocal, Base, engine
from app.api.modules.v1.departments.models import Department  # noqa: F401
from app.api.modules.v1.departments.service.department_service import DepartmentService
from app.api.modules.v1.tickets.models import Ticket  # noqa: F401
from app.api.modules.v1.users.models import User  # noqa: F401
from app.api.modules.v1.users.service.user import UserService
from app.api.utils.response_payloads import success_response

setup_logging()
logger = logging.getLogger("app")


async def seed_defaults():
    """Create the default admin account and departments if missing."""
    async with AsyncSessionLocal() as session:
        await UserService(session).ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
        await DepartmentService(session).ensure_departments(settings.DEPARTMENT_NAMES)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and release them on shutdown.

    Args:
        app (FastAPI): FastAPI application instance supplied by the framework.

    Returns:
        AsyncIterator[None]: Asynchronous context manager controlling startup/shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await seed_defaults()
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")

    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description=f"{settings.APP_NAME} API for filing and working support tickets",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

APP_URL = settings.APP_URL
DEV_URL = settings.DEV_URL

app.add_middleware(
    CORSMiddleware,
    allow_origins=[APP_URL, DEV_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(HelpdeskError, helpdesk_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(api_router)


@app.get("/")
def read_root():
    return success_response(
        status_code=200,
        message=f"{settings.APP_NAME} API is running...",
        data={
            "version": settings.APP_VERSION,
            "environment": "Production" if not settings.DEBUG else "Development",
        },
    )


@app.get("/health")
def health_check():
    return success_response(status_code=200, message="API is healthy")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.APP_PORT, reload=False)
