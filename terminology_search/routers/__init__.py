"""
API routers for Terminology Search.
"""

from terminology_search.routers.health import router as health_router
from terminology_search.routers.session import router as session_router
from terminology_search.routers.terminology import router as terminology_router

__all__ = [
    "health_router",
    "session_router",
    "terminology_router",
]
