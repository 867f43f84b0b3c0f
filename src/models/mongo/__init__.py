# src/models/mongo/__init__.py
"""
MongoDB document models for VoidBox.
Provides document structures for files, users, library entries and abuse flags.
"""

from src.models.mongo.file_model import FileDocument
from src.models.mongo.user_model import UserDocument, user_id_for
from src.models.mongo.user_file_model import UserFileDocument
from src.models.mongo.abuse_flag_model import AbuseFlagDocument

__all__ = [
    "FileDocument",
    "UserDocument",
    "user_id_for",
    "UserFileDocument",
    "AbuseFlagDocument",
]
