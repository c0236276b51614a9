"""
Generation job models
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text, JSON, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from covergen.db.base import Base
from covergen.models.enums import JobStatus


class GenerationJob(Base):
    __tablename__ = "generation_jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), default=JobStatus.QUEUED.value, nullable=False, index=True)
    provider = Column(String(50), nullable=False)
    model = Column(String(100))
    prompt = Column(Text)
    target_store = Column(String(20))
    num_variations = Column(Integer, default=1, nullable=False)
    aspect_ratio = Column(String(20))
    requested_outputs = Column(JSON)  # {"variants": ["a", "b"]}
    job_config = Column(JSON)  # wizard configuration snapshot
    critique = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    started_at = Column(DateTime(timezone=True))
    finished_at = Column(DateTime(timezone=True))
    error_message = Column(Text)
    error_code = Column(String(50))

    # Relationships
    project = relationship("Project", back_populates="generation_jobs")
    job_assets = relationship("JobAsset", back_populates="job", cascade="all, delete-orphan")
    outputs = relationship("GeneratedOutput", back_populates="job", cascade="all, delete-orphan")


class JobAsset(Base):
    __tablename__ = "job_assets"

    job_id = Column(Uuid, ForeignKey("generation_jobs.id", ondelete="CASCADE"), primary_key=True)
    asset_id = Column(Uuid, ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True)
    role = Column(String(30), nullable=False)

    # Relationships
    job = relationship("GenerationJob", back_populates="job_assets")
    asset = relationship("Asset", back_populates="job_assets")
