"""
Library API Routes
REST API endpoints for a user's uploads ("my drops").
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.middleware.auth_middleware import AuthContext, get_optional_auth_context
from src.dependencies import get_library_service
from src.models.schemas import UserFileListResponse, SuccessResponse
from src.services import LibraryService

router = APIRouter(prefix="/mydrops", tags=["library"])


@router.get(
    "",
    response_model=UserFileListResponse,
    summary="List a user's uploads"
)
async def list_my_drops(
        user_id: Optional[str] = Query(None),
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context),
        library_service: LibraryService = Depends(get_library_service)
) -> UserFileListResponse:
    return await library_service.list_files(user_id, auth_context)


@router.delete(
    "/{slug}",
    response_model=SuccessResponse,
    summary="Delete an upload"
)
async def delete_my_drop(
        slug: str,
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context),
        library_service: LibraryService = Depends(get_library_service)
) -> SuccessResponse:
    return await library_service.delete_file(auth_context, slug)
