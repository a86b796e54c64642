"""Supplier reports API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from api.dependencies import get_store
from api.schemas import CategorySummary
from reporting.summary import categories, category_averages, export_suppliers_csv, status_counts
from store.app_store import SupplierStore

router = APIRouter()


@router.get("/suppliers/summary", response_model=CategorySummary)
async def supplier_summary(
    category: Optional[str] = Query(None, description="Restrict to one category"),
    store: SupplierStore = Depends(get_store),
):
    """Average delivery rate, non-conformity rate, NPS and rating."""
    return category_averages(store.suppliers, category)


@router.get("/suppliers/status", response_model=dict[str, int])
async def supplier_status_counts(
    category: Optional[str] = Query(None, description="Restrict to one category"),
    store: SupplierStore = Depends(get_store),
):
    """Supplier count per status."""
    return status_counts(store.suppliers, category)


@router.get("/categories", response_model=list[str])
async def list_categories(store: SupplierStore = Depends(get_store)):
    return categories(store.suppliers)


@router.get("/suppliers.csv")
async def export_suppliers(store: SupplierStore = Depends(get_store)):
    """Supplier table as CSV."""
    return Response(
        content=export_suppliers_csv(store.suppliers),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="suppliers.csv"'},
    )
