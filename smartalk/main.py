"""FastAPI application exposing the learning-progression and analytics engine."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smartalk.config import configure_logging, get_settings
from smartalk.core import container
from smartalk.database import create_tables, dispose_engine, initialize_database
from smartalk.domain.common.exceptions import DomainError, EntityNotFoundError, ValidationError
from smartalk.exceptions import SmartalkError
from smartalk.infrastructure.analytics.routers import analytics
from smartalk.infrastructure.learning.routers import progress

logger = structlog.get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Set up logging and the database, and drain background work on shutdown."""
    configure_logging(settings.ENVIRONMENT)
    initialize_database(settings)
    create_tables()
    logger.info("application_started", environment=settings.ENVIRONMENT)

    yield

    container.dispatcher().shutdown(wait=True)
    container.dispatcher.reset()
    dispose_engine()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Learning progression and analytics funnel engine",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "field": exc.field, "errors": exc.errors},
    )


@app.exception_handler(EntityNotFoundError)
async def not_found_error_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})


@app.exception_handler(SmartalkError)
async def smartalk_error_handler(request: Request, exc: SmartalkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(analytics.router, prefix=settings.API_V1_PREFIX)
app.include_router(progress.router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": f"Welcome to {settings.PROJECT_NAME}", "version": settings.VERSION}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
