# src/models/base_model.py
"""
Base model classes providing common functionality for all models.
Includes serialization helpers for MongoDB documents.
"""

from typing import Optional, Dict, Any, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound="BaseMongoModel")


class BaseMongoModel(BaseModel):
    """
    Base model for MongoDB documents with serialization helpers.
    """

    # MongoDB ObjectId field
    id: Optional[ObjectId] = Field(default=None, alias="_id")

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_default=True,
    )

    def to_dict(self, exclude_none: bool = True, by_alias: bool = True) -> Dict[str, Any]:
        """
        Convert model to dictionary format suitable for MongoDB storage.

        Args:
            exclude_none: Whether to exclude None values
            by_alias: Whether to use field aliases (like _id)

        Returns:
            Dictionary representation of the model
        """
        data = self.model_dump(exclude_none=exclude_none, by_alias=by_alias)

        # Let MongoDB assign the id on insert
        if by_alias and data.get("_id") is None:
            data.pop("_id", None)

        return data

    @classmethod
    def from_dict(cls: Type[T], data: Optional[Dict[str, Any]]) -> Optional[T]:
        """
        Create model instance from dictionary (typically from MongoDB).

        Args:
            data: Dictionary data from MongoDB

        Returns:
            Model instance, or None for a missing document
        """
        if data is None:
            return None
        return cls.model_validate(data)

    @property
    def id_str(self) -> Optional[str]:
        return str(self.id) if self.id is not None else None


class BaseRequestModel(BaseModel):
    """
    Base model for API request validation.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        # The client sends extra fields on some forms
        extra="ignore",
    )


class BaseResponseModel(BaseModel):
    """
    Base model for API responses.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        populate_by_name=True,
    )
