"""
Auth API Routes
REST API endpoints for the Telegram login flow.
"""

from typing import Union

from fastapi import APIRouter, Depends

from src.api.middleware.auth_middleware import AuthContext, get_auth_context
from src.dependencies import get_auth_service
from src.models.schemas import (
    SendCodeRequest,
    LoginRequest,
    SendCodeResponse,
    PasswordRequiredResponse,
    LoginResponse,
    MeResponse,
)
from src.services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/sendCode",
    response_model=SendCodeResponse,
    summary="Send login code",
    description="Ask Telegram to send a login code to a phone number"
)
async def send_code(
        request: SendCodeRequest,
        auth_service: AuthService = Depends(get_auth_service)
) -> SendCodeResponse:
    return await auth_service.send_code(request)


@router.post(
    "/login",
    response_model=Union[LoginResponse, PasswordRequiredResponse],
    summary="Complete login",
    description="Sign in with the received code, or with the two-step verification password"
)
async def login(
        request: LoginRequest,
        auth_service: AuthService = Depends(get_auth_service)
) -> Union[LoginResponse, PasswordRequiredResponse]:
    return await auth_service.login(request)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current user"
)
async def me(
        auth_context: AuthContext = Depends(get_auth_context),
        auth_service: AuthService = Depends(get_auth_service)
) -> MeResponse:
    return await auth_service.me(auth_context)
