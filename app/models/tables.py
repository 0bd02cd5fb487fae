"""
SQLAlchemy ORM models.
Enum columns store the lower-case wire values from app.models.enums.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.database import Base
from app.models.enums import DocCategory, RiskType, Severity


JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls, name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda e: [m.value for m in e],
        validate_strings=True,
    )


# ────────────────────────────────────────────────────────────
# DOCUMENTS
# ────────────────────────────────────────────────────────────
class Document(Base):
    __tablename__ = "documents"

    doc_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    # Relationships
    risk_flags = relationship("RiskFlag", back_populates="document", cascade="all, delete-orphan")
    category = relationship(
        "DocumentCategory", back_populates="document", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_documents_created", "created_at"),
    )


# ────────────────────────────────────────────────────────────
# RISK FLAGS
# ────────────────────────────────────────────────────────────
class RiskFlag(Base):
    __tablename__ = "risk_flags"

    flag_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    doc_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.doc_id", ondelete="CASCADE"), nullable=False
    )
    # Position within the analysis batch; keeps detector order on read
    batch_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    risk_type: Mapped[RiskType] = mapped_column(_enum(RiskType, "risk_type_enum"), nullable=False)
    severity: Mapped[Severity] = mapped_column(_enum(Severity, "severity_enum"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    affected_text: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False)
    suggestions: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    document = relationship("Document", back_populates="risk_flags")

    __table_args__ = (
        Index("idx_risk_flags_doc", "doc_id", "is_resolved"),
    )


# ────────────────────────────────────────────────────────────
# DOCUMENT CATEGORIES (one per document)
# ────────────────────────────────────────────────────────────
class DocumentCategory(Base):
    __tablename__ = "document_categories"

    category_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    doc_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("documents.doc_id", ondelete="CASCADE"), nullable=False
    )
    category: Mapped[DocCategory] = mapped_column(_enum(DocCategory, "doc_category_enum"), nullable=False)
    subcategory: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    suggested_workflow: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    auto_detected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    document = relationship("Document", back_populates="category")

    __table_args__ = (
        UniqueConstraint("doc_id", name="uq_document_categories_doc"),
    )
