# src/models/mongo/user_model.py
"""
MongoDB document model for users.
Users are keyed by their Telegram account rather than an ObjectId.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from src.config.constants import USER_ID_PREFIX
from src.models.base_model import BaseMongoModel
from src.utils.date_utils import utc_now


def user_id_for(telegram_id: int) -> str:
    """Build the user document id for a Telegram account"""
    return f"{USER_ID_PREFIX}{telegram_id}"


class UserDocument(BaseMongoModel):
    """
    MongoDB document structure for a VoidBox user.
    """

    id: str = Field(..., alias="_id")
    telegram_id: int
    first_name: str = "User"
    last_name: Optional[str] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None

    # Personal storage channel
    channel_id: Optional[int] = None

    created_at: datetime = Field(default_factory=utc_now)
