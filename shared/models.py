"""Database models backing the template catalog."""
from __future__ import annotations

import enum
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


class TemplateCategory(str, enum.Enum):
    RESTAURANT = "RESTAURANT"
    GYM = "GYM"
    SALON = "SALON"
    REAL_ESTATE = "REAL_ESTATE"
    ECOMMERCE = "ECOMMERCE"
    AGENCY = "AGENCY"
    HOME_SERVICES = "HOME_SERVICES"
    HEALTHCARE = "HEALTHCARE"
    EDUCATION = "EDUCATION"
    AUTOMOTIVE = "AUTOMOTIVE"
    HOSPITALITY = "HOSPITALITY"
    GENERAL = "GENERAL"


class Visibility(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class CreativeType(str, enum.Enum):
    HEADLINE = "HEADLINE"
    PRIMARY_TEXT = "PRIMARY_TEXT"
    DESCRIPTION = "DESCRIPTION"


class ImportStatus(str, enum.Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def _utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""

    return datetime.now(UTC)


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(String(320), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    tokens = relationship("SessionToken", back_populates="user")


class SessionToken(Base):
    __tablename__ = "session_tokens"

    id = Column(UUID(as_uuid=True), primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    token = Column(String(128), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="tokens")


class AdTemplate(Base):
    """Stored template row.

    ``targeting``, ``budget`` and ``ad_copy`` hold JSON encoded text; only
    :mod:`catalog.repository` reads or writes them.
    """

    __tablename__ = "ad_templates"
    __table_args__ = (Index("ix_ad_templates_name_category", "name", "category"),)

    id = Column(UUID(as_uuid=True), primary_key=True)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    visibility = Column(Enum(Visibility), default=Visibility.PUBLIC, nullable=False)
    name = Column(String(255), nullable=False)
    category = Column(Enum(TemplateCategory), default=TemplateCategory.GENERAL, nullable=False)
    description = Column(Text)
    objective = Column(String(64), nullable=False)
    conversion_method = Column(String(64), nullable=False)
    targeting = Column(Text, nullable=False)
    budget = Column(Text, nullable=False)
    ad_copy = Column(Text, nullable=False)
    image_url = Column(String(1024))
    usage_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    owner = relationship("User")


class AgentTask(Base):
    """Conversational ad-creation task written by the agent flow."""

    __tablename__ = "agent_tasks"

    id = Column(UUID(as_uuid=True), primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    status = Column(String(32), default="COMPLETED", nullable=False)
    conversion_method = Column(String(64))
    recommendations = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    creatives = relationship(
        "GeneratedCreative",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="GeneratedCreative.position",
    )


class GeneratedCreative(Base):
    __tablename__ = "generated_creatives"

    id = Column(UUID(as_uuid=True), primary_key=True)
    task_id = Column(UUID(as_uuid=True), ForeignKey("agent_tasks.id"), nullable=False)
    type = Column(Enum(CreativeType), nullable=False)
    content = Column(Text, nullable=False)
    is_selected = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=0, nullable=False)

    task = relationship("AgentTask", back_populates="creatives")


class ImportBatch(Base):
    __tablename__ = "import_batches"

    id = Column(UUID(as_uuid=True), primary_key=True)
    requested_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    source = Column(String(255), default="upload", nullable=False)
    status = Column(Enum(ImportStatus), default=ImportStatus.RUNNING, nullable=False)
    total_rows = Column(Integer, default=0, nullable=False)
    imported = Column(Integer, default=0, nullable=False)
    skipped = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    finished_at = Column(DateTime(timezone=True))

    logs = relationship("ImportLog", back_populates="batch", cascade="all, delete-orphan")


class ImportLog(Base):
    __tablename__ = "import_logs"

    id = Column(UUID(as_uuid=True), primary_key=True)
    batch_id = Column(UUID(as_uuid=True), ForeignKey("import_batches.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    level = Column(String(16), default="info", nullable=False)
    message = Column(Text, nullable=False)
    data = Column("metadata", JSON, default=dict, nullable=False)

    batch = relationship("ImportBatch", back_populates="logs")
