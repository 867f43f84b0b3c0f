"""
File API Routes
REST API endpoints for uploading, describing and downloading files.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import Response, PlainTextResponse

from src.api.middleware.auth_middleware import AuthContext, get_optional_auth_context
from src.api.middleware.rate_limit_middleware import api_rate_limit
from src.dependencies import get_file_service
from src.models.schemas import (
    FileInfoResponse,
    UploadResponse,
    ZipListResponse,
    FlagRequest,
    SuccessResponse,
)
from src.services import FileService, UploadedFile, UploadOptions
from src.utils.dependencies import get_client_ip
from src.utils.formatters import content_disposition

router = APIRouter(tags=["files"], dependencies=[Depends(api_rate_limit)])


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=201,
    summary="Upload a file",
    description="Store a file or note in the caller's VoidBox Drive channel"
)
async def upload_file(
        request: Request,
        file: Optional[UploadFile] = File(None),
        expiry_at: Optional[str] = Form(None),
        expiry_days: Optional[str] = Form(None),
        is_note: Optional[str] = Form(None),
        notes: Optional[str] = Form(None),
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context),
        file_service: FileService = Depends(get_file_service)
) -> UploadResponse:
    upload = None
    if file is not None and file.filename:
        upload = UploadedFile(
            filename=file.filename,
            content_type=file.content_type,
            size=file.size,
            reader=file.read
        )

    options = UploadOptions(
        expiry_at=expiry_at,
        expiry_days=expiry_days,
        is_note=is_note,
        notes=notes
    )

    return await file_service.upload(
        auth_context,
        upload,
        options,
        uploader_ip=get_client_ip(request)
    )


@router.get(
    "/file/{slug}",
    response_model=FileInfoResponse,
    summary="File metadata"
)
async def get_file_info(
        slug: str,
        file_service: FileService = Depends(get_file_service)
) -> FileInfoResponse:
    return await file_service.get_info(slug)


@router.get(
    "/download/{slug}",
    summary="Download a file",
    response_class=Response
)
async def download_file(
        slug: str,
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context),
        file_service: FileService = Depends(get_file_service)
) -> Response:
    file, data = await file_service.download(auth_context, slug)
    return Response(
        content=data,
        media_type=file.mimetype,
        headers={"Content-Disposition": content_disposition(file.name, file.mimetype)}
    )


@router.get(
    "/note-content/{slug}",
    summary="Note text",
    response_class=PlainTextResponse
)
async def get_note_content(
        slug: str,
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context),
        file_service: FileService = Depends(get_file_service)
) -> PlainTextResponse:
    text = await file_service.note_content(auth_context, slug)
    return PlainTextResponse(text, headers={"Access-Control-Allow-Origin": "*"})


@router.get(
    "/zip-list/{slug}",
    response_model=ZipListResponse,
    summary="ZIP archive entries"
)
async def get_zip_list(
        slug: str,
        auth_context: Optional[AuthContext] = Depends(get_optional_auth_context),
        file_service: FileService = Depends(get_file_service)
) -> ZipListResponse:
    return await file_service.zip_list(auth_context, slug)


@router.post(
    "/flag",
    response_model=SuccessResponse,
    summary="Report a file"
)
async def flag_file(
        request: Request,
        flag: FlagRequest,
        file_service: FileService = Depends(get_file_service)
) -> SuccessResponse:
    return await file_service.flag(flag, ip=get_client_ip(request))
