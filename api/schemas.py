"""Pydantic schemas: in-memory entity shapes and API request/response bodies.

Entity attributes are snake_case in Python and serialize to camelCase for the
presentation layer. Fields that have no remote column (metrics, nested
collections, attachments) carry defaults here and are never written upstream.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

NON_CONFORMITY_GRACE_DAYS = int(os.getenv("NON_CONFORMITY_GRACE_DAYS", "7"))

SupplierStatus = Literal["active", "inactive", "blocked", "temporarily_blocked"]
EvaluationType = Literal["positive", "negative"]
NonConformityType = Literal["quality", "delivery", "documentation", "communication", "other"]
Severity = Literal["low", "medium", "high", "critical"]
NonConformityStatus = Literal["open", "in_progress", "resolved", "escalated"]

# Resolved is terminal; staying in the same status is always allowed.
NON_CONFORMITY_TRANSITIONS: dict[str, frozenset[str]] = {
    "open": frozenset({"in_progress", "resolved", "escalated"}),
    "in_progress": frozenset({"resolved", "escalated"}),
    "escalated": frozenset({"in_progress", "resolved"}),
    "resolved": frozenset(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class Document(CamelModel):
    """Uploaded file, optionally tied to a supplier, evaluation or non-conformity."""

    id: str
    name: str
    url: str
    type: str
    size: int = Field(0, ge=0)
    uploaded_by: str
    uploaded_at: datetime = Field(default_factory=_utcnow)
    supplier_id: Optional[str] = None
    evaluation_id: Optional[str] = None
    non_conformity_id: Optional[str] = None


class Recommendation(CamelModel):
    id: str
    supplier_id: str
    type: Literal["improvement", "warning", "action_required", "recognition"]
    title: str
    description: str
    priority: Literal["low", "medium", "high"] = "medium"
    created_at: datetime = Field(default_factory=_utcnow)
    due_date: Optional[datetime] = None
    status: Literal["pending", "in_progress", "completed", "archived"] = "pending"
    ai_generated: bool = False


class MetricHistory(CamelModel):
    """One periodic snapshot of a supplier's metrics."""

    date: datetime
    delivery_rate: float = 0.0
    non_conformity_rate: float = 0.0
    nps_score: float = 0.0
    quality_score: float = 0.0
    positive_evaluations: int = 0
    negative_evaluations: int = 0


class SupplierMetrics(CamelModel):
    """Embedded supplier metrics. Not persisted remotely, zeroed on every read.

    ``last_updated`` stays None until something actually computes the metrics.
    """

    delivery_rate: float = 0.0
    non_conformity_rate: float = 0.0
    nps_score: float = 0.0
    response_time: float = 0.0
    quality_score: float = 0.0
    positive_evaluations: int = 0
    negative_evaluations: int = 0
    total_evaluations: int = 0
    last_updated: Optional[datetime] = None
    historical_data: list[MetricHistory] = Field(default_factory=list)


class Ratings(CamelModel):
    """Four component scores; ``overall`` is always their arithmetic mean."""

    quality: float = Field(..., ge=0, le=5)
    price: float = Field(..., ge=0, le=5)
    delivery: float = Field(..., ge=0, le=5)
    communication: float = Field(..., ge=0, le=5)
    overall: float = 0.0

    @model_validator(mode="after")
    def _derive_overall(self) -> "Ratings":
        self.overall = (self.quality + self.price + self.delivery + self.communication) / 4
        return self


# ── Non-conformities ────────────────────────────────────────────────────────


class NonConformityFields(CamelModel):
    supplier_id: str
    type: NonConformityType
    severity: Severity = "medium"
    description: str
    reported_date: datetime = Field(default_factory=_utcnow)
    resolution_date: Optional[datetime] = None
    resolution: Optional[str] = None
    escalation_reason: Optional[str] = None
    impact: str = ""
    attachments: list[Document] = Field(default_factory=list)


class NonConformityCreate(NonConformityFields):
    """New incident. Always opens in ``open`` status; the deadline defaults to
    the report date plus the grace period."""

    status: Literal["open"] = "open"
    resolution_deadline: Optional[datetime] = None

    @model_validator(mode="after")
    def _default_deadline(self) -> "NonConformityCreate":
        if self.resolution_deadline is None:
            self.resolution_deadline = self.reported_date + timedelta(days=NON_CONFORMITY_GRACE_DAYS)
        return self


class NonConformity(NonConformityFields):
    id: str
    status: NonConformityStatus
    resolution_deadline: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Suppliers ───────────────────────────────────────────────────────────────


class SupplierFields(CamelModel):
    name: str = Field(..., min_length=1)
    legal_name: str
    document_number: str = Field(..., description="CNPJ / CPF or other tax id")
    category: str
    email: str
    phone: str
    whatsapp: Optional[str] = None
    address: Optional[str] = None
    location_url: Optional[str] = None
    average_rating: float = Field(0.0, ge=0, le=5)
    last_evaluation: Optional[datetime] = None
    status: SupplierStatus = "active"
    custom_fields: dict[str, str] = Field(default_factory=dict)


class SupplierCreate(SupplierFields):
    pass


class Supplier(SupplierFields):
    id: str
    metrics: SupplierMetrics = Field(default_factory=SupplierMetrics)
    non_conformities: list[NonConformity] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    google_sheet_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ── Evaluations ─────────────────────────────────────────────────────────────


class EvaluationFields(CamelModel):
    supplier_id: str
    evaluator: str
    date: datetime = Field(default_factory=_utcnow)
    ratings: Ratings
    comments: str = ""
    attachments: list[Document] = Field(default_factory=list)
    type: Optional[EvaluationType] = None
    purchase_order_number: str = ""

    @model_validator(mode="after")
    def _derive_type(self) -> "EvaluationFields":
        if self.type is None:
            self.type = "positive" if self.ratings.overall >= 3 else "negative"
        return self


class EvaluationCreate(EvaluationFields):
    pass


class Evaluation(EvaluationFields):
    id: str
    created_at: Optional[datetime] = None


# ── API request / response bodies ───────────────────────────────────────────


class SupplierUpdate(CamelModel):
    name: Optional[str] = None
    legal_name: Optional[str] = None
    document_number: Optional[str] = None
    category: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[str] = None
    location_url: Optional[str] = None
    average_rating: Optional[float] = Field(None, ge=0, le=5)
    last_evaluation: Optional[datetime] = None
    status: Optional[SupplierStatus] = None
    custom_fields: Optional[dict[str, str]] = None


class EvaluationUpdate(CamelModel):
    evaluator: Optional[str] = None
    date: Optional[datetime] = None
    ratings: Optional[Ratings] = None
    comments: Optional[str] = None
    type: Optional[EvaluationType] = None
    purchase_order_number: Optional[str] = None


class NonConformityUpdate(CamelModel):
    type: Optional[NonConformityType] = None
    severity: Optional[Severity] = None
    description: Optional[str] = None
    status: Optional[NonConformityStatus] = None
    resolution_deadline: Optional[datetime] = None
    resolution_date: Optional[datetime] = None
    resolution: Optional[str] = None
    escalation_reason: Optional[str] = None
    impact: Optional[str] = None


class ResolveRequest(CamelModel):
    resolution: str = Field(..., min_length=1)


class EscalateRequest(CamelModel):
    reason: str = Field(..., min_length=1)


class SheetLinkRequest(CamelModel):
    url: str


class SheetLinkRead(CamelModel):
    supplier_id: str
    google_sheet_id: str


class SupplierImportRequest(CamelModel):
    rows: list[dict[str, Any]]
    mappings: Optional[dict[str, str]] = None


class RejectedRowRead(CamelModel):
    row: int
    errors: list[str]


class SupplierImportRead(CamelModel):
    imported: list[Supplier]
    rejected: list[RejectedRowRead] = Field(default_factory=list)


class CategorySummary(CamelModel):
    category: Optional[str] = None
    supplier_count: int
    delivery_rate: float
    non_conformity_rate: float
    nps_score: float
    average_rating: float
    open_non_conformities: int
