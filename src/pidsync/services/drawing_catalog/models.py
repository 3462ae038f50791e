"""
Data models for the drawing catalog.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import Field, field_validator

from ...shared import BaseModel


class Drawing(BaseModel):
    """A drawing sheet registered in the catalog."""

    id: str = Field(..., description="Drawing id, referenced by asset drawingId")
    name: str = Field(..., description="Display name")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Drawing name cannot be empty")
        return v

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Drawing":
        """Build from a catalog query row, converting Neo4j temporal values."""
        return cls(
            id=record['id'],
            name=record.get('name') or record['id'],
            created_at=_native(record.get('created_at')),
            updated_at=_native(record.get('updated_at')),
        )


def _native(value):
    if value is None:
        return None
    to_native = getattr(value, 'to_native', None)
    return to_native() if to_native else value
