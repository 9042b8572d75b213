"""
Health check endpoints.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from terminology_search.config.settings import get_settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    terminology_server: str


@router.get("/health")
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns the service status and the configured terminology server.
    """
    return HealthResponse(
        status="healthy",
        service="terminology-search",
        version="0.1.0",
        terminology_server=get_settings().base_url,
    )
