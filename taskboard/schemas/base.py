"""
Base Pydantic schemas with common fields.

Wire names follow the document-store convention (_id, camelCase); Python
attributes stay snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentRead(BaseModel):
    """
    Base schema for reading a stored document.
    
    Includes the store-assigned fields.
    """
    
    id: str = Field(alias="_id")
    date_created: datetime = Field(alias="dateCreated")
    
    # Read straight from SQLAlchemy models, emit aliases
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """JSON-ready dict using wire names."""
        return self.model_dump(by_alias=True, mode="json")
