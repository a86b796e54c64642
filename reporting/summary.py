"""Read-only supplier reports built from the store's current state."""

import io
import logging
from typing import Iterable, Optional

import pandas as pd

from api.schemas import Supplier

logger = logging.getLogger(__name__)

SUPPLIER_COLUMNS = [
    "id",
    "name",
    "legal_name",
    "document_number",
    "category",
    "status",
    "email",
    "phone",
    "average_rating",
    "delivery_rate",
    "non_conformity_rate",
    "nps_score",
    "total_evaluations",
    "open_non_conformities",
    "total_non_conformities",
]

_OPEN_STATUSES = {"open", "in_progress", "escalated"}


def suppliers_frame(suppliers: Iterable[Supplier]) -> pd.DataFrame:
    """One row per supplier with its headline metrics."""
    rows = [
        {
            "id": s.id,
            "name": s.name,
            "legal_name": s.legal_name,
            "document_number": s.document_number,
            "category": s.category,
            "status": s.status,
            "email": s.email,
            "phone": s.phone,
            "average_rating": s.average_rating,
            "delivery_rate": s.metrics.delivery_rate,
            "non_conformity_rate": s.metrics.non_conformity_rate,
            "nps_score": s.metrics.nps_score,
            "total_evaluations": s.metrics.total_evaluations,
            "open_non_conformities": sum(1 for nc in s.non_conformities if nc.status in _OPEN_STATUSES),
            "total_non_conformities": len(s.non_conformities),
        }
        for s in suppliers
    ]
    return pd.DataFrame(rows, columns=SUPPLIER_COLUMNS)


def category_averages(suppliers: Iterable[Supplier], category: Optional[str] = None) -> dict:
    """Average metrics over all suppliers, or over one category.

    An empty selection averages to zero rather than NaN.
    """
    df = suppliers_frame(suppliers)
    if category:
        df = df[df["category"] == category]
    if df.empty:
        return {
            "category": category,
            "supplier_count": 0,
            "delivery_rate": 0.0,
            "non_conformity_rate": 0.0,
            "nps_score": 0.0,
            "average_rating": 0.0,
            "open_non_conformities": 0,
        }
    return {
        "category": category,
        "supplier_count": int(len(df)),
        "delivery_rate": float(df["delivery_rate"].mean()),
        "non_conformity_rate": float(df["non_conformity_rate"].mean()),
        "nps_score": float(df["nps_score"].mean()),
        "average_rating": float(df["average_rating"].mean()),
        "open_non_conformities": int(df["open_non_conformities"].sum()),
    }


def categories(suppliers: Iterable[Supplier]) -> list[str]:
    return sorted({s.category for s in suppliers})


def status_counts(suppliers: Iterable[Supplier], category: Optional[str] = None) -> dict[str, int]:
    """Number of suppliers per status; statuses with no supplier are left out."""
    df = suppliers_frame(suppliers)
    if category:
        df = df[df["category"] == category]
    counts = df["status"].value_counts()
    return {str(status): int(n) for status, n in sorted(counts.items())}


def export_suppliers_csv(suppliers: Iterable[Supplier]) -> str:
    """Supplier table as CSV text, best average rating first."""
    df = suppliers_frame(suppliers).sort_values("average_rating", ascending=False, kind="stable")
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    logger.info("Exported %d suppliers to CSV", len(df))
    return buf.getvalue()
