# src/models/mongo/file_model.py
"""
MongoDB document model for stored files.
One document per upload, pointing at the channel message holding the bytes.
"""

from datetime import datetime
from typing import Dict, Any, Optional

from pydantic import Field

from src.config.constants import DOWNLOAD_PATH
from src.models.base_model import BaseMongoModel
from src.utils.date_utils import utc_now


class FileDocument(BaseMongoModel):
    """
    MongoDB document structure for an uploaded file.
    """

    name: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    mimetype: str
    slug: str = Field(..., min_length=1, max_length=64)
    uploader_ip: str = ""

    # Location of the bytes on Telegram
    telegram_file_id: str
    telegram_message_id: str

    download_count: int = Field(default=0, ge=0)
    expiry_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the file has an expiry date in the past"""
        if self.expiry_at is None:
            return False
        return self.expiry_at < (now or utc_now())

    @property
    def message_id(self) -> int:
        return int(self.telegram_message_id)

    def public_info(self) -> Dict[str, Any]:
        """Metadata shown to anyone holding the slug"""
        return {
            "name": self.name,
            "size": self.size,
            "mimetype": self.mimetype,
            "created_at": self.created_at,
            "download_count": self.download_count,
            "expiry_at": self.expiry_at,
        }

    @property
    def download_url(self) -> str:
        return f"{DOWNLOAD_PATH}/{self.slug}"
