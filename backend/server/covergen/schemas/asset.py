"""
Asset schemas for API request/response validation
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, UUID4
from covergen.models.enums import AssetType


class Asset(BaseModel):
    id: UUID4
    project_id: UUID4
    storage_key: str
    type: AssetType
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SignedUrl(BaseModel):
    url: str
    expires_in: int
