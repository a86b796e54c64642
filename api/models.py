"""SQLAlchemy models for the remote supplier database (wire shape)."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all models."""

    type_annotation_map = {
        dict[str, Any]: JSONType,
    }


class SupplierRecord(Base):
    """Suppliers under evaluation."""

    __tablename__ = "suppliers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256))
    legal_name: Mapped[str] = mapped_column(String(256))
    document_number: Mapped[str] = mapped_column(String(32), index=True)
    category: Mapped[str] = mapped_column(String(128), index=True)
    email: Mapped[str] = mapped_column(String(256))
    phone: Mapped[str] = mapped_column(String(64))
    whatsapp: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    average_rating: Mapped[float] = mapped_column(Float, default=0.0)
    last_evaluation: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(32), index=True, default="active")
    custom_fields: Mapped[Optional[dict[str, Any]]] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class EvaluationRecord(Base):
    """Scored reviews of a supplier (one per purchase/interaction)."""

    __tablename__ = "evaluations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    supplier_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("suppliers.id", ondelete="CASCADE"), index=True
    )
    evaluator: Mapped[str] = mapped_column(String(256))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    ratings: Mapped[dict[str, Any]] = mapped_column()
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(16), index=True)  # positive | negative
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class NonConformityRecord(Base):
    """Quality / process incidents attributed to a supplier."""

    __tablename__ = "non_conformities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    supplier_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("suppliers.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[str] = mapped_column(String(32))  # quality | delivery | documentation | communication | other
    severity: Mapped[str] = mapped_column(String(16), index=True)  # low | medium | high | critical
    description: Mapped[str] = mapped_column(Text)
    reported_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(16), index=True)  # open | in_progress | resolved | escalated
    resolution_deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    resolution_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    escalation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    impact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
