"""
Data Models Package
==================

Data models for VoidBox: MongoDB documents, API schemas and common
type definitions.
"""

from .types import UserId, Slug, TelegramId, ChannelId, UTCDateTime
from .base_model import BaseMongoModel, BaseRequestModel, BaseResponseModel
from .mongo import (
    FileDocument,
    UserDocument,
    UserFileDocument,
    AbuseFlagDocument,
    user_id_for,
)

__all__ = [
    # Types
    "UserId",
    "Slug",
    "TelegramId",
    "ChannelId",
    "UTCDateTime",

    # Base models
    "BaseMongoModel",
    "BaseRequestModel",
    "BaseResponseModel",

    # Documents
    "FileDocument",
    "UserDocument",
    "UserFileDocument",
    "AbuseFlagDocument",
    "user_id_for",
]
