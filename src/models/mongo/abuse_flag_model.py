# src/models/mongo/abuse_flag_model.py
"""
MongoDB document model for abuse reports.
"""

from datetime import datetime

from bson import ObjectId
from pydantic import Field

from src.models.base_model import BaseMongoModel
from src.utils.date_utils import utc_now


class AbuseFlagDocument(BaseMongoModel):
    """Abuse report against a stored file"""

    file_id: ObjectId
    reason: str = Field(..., min_length=1)
    ip: str = ""
    flagged_at: datetime = Field(default_factory=utc_now)
