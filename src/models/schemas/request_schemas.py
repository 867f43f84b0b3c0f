# src/models/schemas/request_schemas.py
"""
Pydantic schemas for API request validation.
Field names follow the JSON the single-page client sends.
"""

from typing import Optional

from pydantic import Field

from src.models.base_model import BaseRequestModel


# ============================================================================
# AUTH REQUEST SCHEMAS
# ============================================================================

class SendCodeRequest(BaseRequestModel):
    """Request schema for the first login step."""

    phone_number: Optional[str] = Field(None, alias="phoneNumber", max_length=32)

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {"phoneNumber": "+15551234567"}
        },
    }


class LoginRequest(BaseRequestModel):
    """
    Request schema for the second login step.

    Either the OTP fields or ``password`` (two-step verification)
    accompany the temporary token from the previous step.
    """

    phone_number: Optional[str] = Field(None, alias="phoneNumber", max_length=32)
    phone_code: Optional[str] = Field(None, alias="phoneCode", max_length=16)
    phone_code_hash: Optional[str] = Field(None, alias="phoneCodeHash", max_length=256)
    password: Optional[str] = Field(None, max_length=256)
    temp_token: Optional[str] = Field(None, alias="tempToken")

    model_config = {
        "populate_by_name": True,
        # Passwords may legitimately start or end with spaces
        "str_strip_whitespace": False,
        "json_schema_extra": {
            "example": {
                "phoneNumber": "+15551234567",
                "phoneCode": "12345",
                "phoneCodeHash": "a1b2c3d4e5",
                "tempToken": "eyJhbGciOi..."
            }
        },
    }


# ============================================================================
# FILE REQUEST SCHEMAS
# ============================================================================

class FlagRequest(BaseRequestModel):
    """Request schema for reporting a file."""

    file_id: Optional[str] = Field(None, max_length=64)
    slug: Optional[str] = Field(None, max_length=64)
    reason: Optional[str] = Field(None, max_length=1000)

    model_config = {
        "json_schema_extra": {
            "example": {"slug": "AbCdEf12", "reason": "Malware"}
        },
    }
