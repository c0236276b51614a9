"""
Asset model
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, BigInteger, Text, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from covergen.db.base import Base
from covergen.models.enums import AssetType


class Asset(Base):
    __tablename__ = "assets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_key = Column(Text, nullable=False)
    type = Column(String(30), default=AssetType.OTHER.value, nullable=False)
    original_filename = Column(String(255))
    mime_type = Column(String(100))
    size_bytes = Column(BigInteger)
    width = Column(Integer)
    height = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # tombstone

    # Relationships
    project = relationship("Project", back_populates="assets")
    job_assets = relationship("JobAsset", back_populates="asset", cascade="all, delete-orphan")
