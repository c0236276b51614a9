"""
Generated output model
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, BigInteger, Text, Uuid, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from covergen.db.base import Base


class GeneratedOutput(Base):
    __tablename__ = "generated_outputs"
    __table_args__ = (
        UniqueConstraint("job_id", "variant_index", name="uq_generated_outputs_job_variant"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id = Column(Uuid, ForeignKey("generation_jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    variant_index = Column(Integer, nullable=False)
    label = Column(String(50))
    mime_type = Column(String(100), default="image/png")
    size_bytes = Column(BigInteger)
    width = Column(Integer)
    height = Column(Integer)
    storage_key = Column(Text, nullable=False)
    storage_provider = Column(String(50), default="local")
    checksum_sha256 = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    job = relationship("GenerationJob", back_populates="outputs")
    project = relationship("Project", back_populates="outputs")
