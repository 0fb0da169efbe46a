import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Text, ForeignKey, DateTime, Boolean, JSON, UniqueConstraint
from prompthub.db.base import Base


def utcnow():
    return datetime.now(timezone.utc)


class PromptMaster(Base):
    __tablename__ = "prompt_master"

    prompt_id = Column(String(128), primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)

    # Null only between header creation and first version creation
    active_version_id = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Reserved for forking; always null for now
    parent_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class PromptVersion(Base):
    __tablename__ = "prompt_versions"
    __table_args__ = (
        UniqueConstraint("prompt_id", "version_number", name="uq_prompt_versions_prompt_number"),
    )

    version_id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    prompt_id = Column(String(128), ForeignKey("prompt_master.prompt_id"), nullable=False, index=True)

    version_number = Column(Integer, nullable=False)
    prompt_text = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON, default=dict, nullable=False)
    created_by = Column(String, default="system", nullable=False)
    is_published = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
