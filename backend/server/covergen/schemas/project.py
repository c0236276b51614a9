"""
Project schemas for API request/response validation
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, UUID4
from covergen.models.enums import TargetPlatform


class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    target_platform: TargetPlatform = TargetPlatform.BOTH
    app_name: Optional[str] = None
    locale: Optional[str] = None
    notes: Optional[str] = None


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    target_platform: Optional[TargetPlatform] = None
    app_name: Optional[str] = None
    locale: Optional[str] = None
    notes: Optional[str] = None


class Project(ProjectBase):
    id: UUID4
    user_id: UUID4
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
