"""
Terminology Search - Main application entry point.

An async service for incrementally searching a FHIR terminology server for
Code Systems, Value Sets and Concepts, including ECL-filtered concepts.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from terminology_search.config.logging import configure_logging, get_logger
from terminology_search.config.settings import get_settings
from terminology_search.routers import health_router, session_router, terminology_router
from terminology_search.services.gateway import close_gateway, get_gateway

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    # Startup
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    logger.info("Starting Terminology Search", host=settings.host, port=settings.port)

    gateway = get_gateway()
    logger.info("Using terminology server", base_url=gateway.base_url)

    yield

    # Shutdown
    logger.info("Shutting down Terminology Search")
    await close_gateway()
    logger.info("Closed terminology gateway")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Terminology Search",
        description="Incremental Code System, Value Set, Concept and ECL search over a FHIR terminology server",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Add CORS middleware
    origins = settings.cors_origins.split(",") if settings.cors_origins != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router)
    app.include_router(terminology_router)
    app.include_router(session_router)

    return app


# Create the application instance
app = create_app()


def run():
    """Run the Terminology Search server."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    uvicorn.run(
        "terminology_search.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
