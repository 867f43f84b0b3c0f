# src/models/mongo/user_file_model.py
"""
MongoDB document model for a user's library entries ("my drops").
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from src.config.constants import UserFileType
from src.models.base_model import BaseMongoModel
from src.utils.date_utils import utc_now


class UserFileDocument(BaseMongoModel):
    """
    Library entry linking a user to one of their uploads.
    """

    user_id: str
    name: str
    slug: str
    mimetype: str
    size: int = Field(..., ge=0)
    notes: Optional[str] = None
    type: UserFileType = UserFileType.FILE
    created_at: datetime = Field(default_factory=utc_now)
