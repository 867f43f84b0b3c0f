"""
API Routes Package
VoidBox API endpoints.
"""

from fastapi import APIRouter, Depends

from src.api.middleware.rate_limit_middleware import global_rate_limit
from src.config.constants import API_PREFIX

from .auth_routes import router as auth_router
from .file_routes import router as file_router
from .library_routes import router as library_router
from .health_routes import router as health_router

# Create main API router
router = APIRouter(prefix=API_PREFIX, dependencies=[Depends(global_rate_limit)])

# Include all sub-routers
router.include_router(auth_router)
router.include_router(file_router)
router.include_router(library_router)

__all__ = [
    "router",
    "auth_router",
    "file_router",
    "library_router",
    "health_router",
]
