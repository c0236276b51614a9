"""
Project model
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from covergen.db.base import Base
from covergen.models.enums import TargetPlatform


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    target_platform = Column(String(20), default=TargetPlatform.BOTH.value, nullable=False)
    app_name = Column(String(255))
    locale = Column(String(20))
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="projects")
    assets = relationship("Asset", back_populates="project", cascade="all, delete-orphan")
    generation_jobs = relationship("GenerationJob", back_populates="project", cascade="all, delete-orphan")
    outputs = relationship("GeneratedOutput", back_populates="project", cascade="all, delete-orphan")
