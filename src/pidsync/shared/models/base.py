"""
Base models and mixins for P&ID Sync.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel as PydanticBaseModel, Field


class BaseModel(PydanticBaseModel):
    """
    Base model for all P&ID Sync data structures.

    Provides common configuration and utilities.
    """

    class Config:
        # Allow field population by name or alias
        validate_by_name = True
        # Validate assignments after object creation
        validate_assignment = True
        # Use enum values instead of enum names
        use_enum_values = True
        extra = "forbid"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin(PydanticBaseModel):
    """
    Mixin to add timestamp fields to models.
    """
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()
