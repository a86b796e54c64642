"""Suppliers API router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import get_store
from api.schemas import (
    Evaluation,
    NonConformity,
    SheetLinkRead,
    SheetLinkRequest,
    Supplier,
    SupplierCreate,
    SupplierStatus,
    SupplierUpdate,
)
from store.app_store import SupplierStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _cached_supplier(store: SupplierStore, supplier_id: str) -> Supplier:
    supplier = store.get_supplier(supplier_id)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


@router.get("", response_model=list[Supplier])
async def list_suppliers(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    category: Optional[str] = Query(None),
    status: Optional[SupplierStatus] = Query(None),
    store: SupplierStore = Depends(get_store),
):
    """List cached suppliers with their non-conformities."""
    suppliers = store.suppliers
    if category:
        suppliers = [s for s in suppliers if s.category == category]
    if status:
        suppliers = [s for s in suppliers if s.status == status]
    return suppliers[offset : offset + limit]


@router.post("", response_model=Supplier, status_code=201)
async def create_supplier(body: SupplierCreate, store: SupplierStore = Depends(get_store)):
    """Create a supplier; the response carries the server-assigned id."""
    return await store.add_supplier(body)


@router.get("/{supplier_id}", response_model=Supplier)
async def get_supplier(supplier_id: str, store: SupplierStore = Depends(get_store)):
    """Get supplier by ID."""
    return _cached_supplier(store, supplier_id)


@router.put("/{supplier_id}", response_model=Supplier)
async def update_supplier(
    supplier_id: str,
    body: SupplierUpdate,
    store: SupplierStore = Depends(get_store),
):
    """Apply the given fields to the cached supplier and save it."""
    current = _cached_supplier(store, supplier_id)
    merged = Supplier.model_validate({**current.model_dump(), **body.model_dump(exclude_unset=True)})
    return await store.update_supplier(merged)


@router.delete("/{supplier_id}", status_code=204)
async def delete_supplier(supplier_id: str, store: SupplierStore = Depends(get_store)):
    """Delete a supplier with its evaluations and non-conformities."""
    await store.delete_supplier(supplier_id)
    return Response(status_code=204)


@router.get("/{supplier_id}/non-conformities", response_model=list[NonConformity])
async def list_supplier_non_conformities(supplier_id: str, store: SupplierStore = Depends(get_store)):
    """Non-conformities reported against a supplier."""
    _cached_supplier(store, supplier_id)
    return store.non_conformities_for(supplier_id)


@router.get("/{supplier_id}/evaluations", response_model=list[Evaluation])
async def list_supplier_evaluations(supplier_id: str, store: SupplierStore = Depends(get_store)):
    """Evaluations of a supplier."""
    _cached_supplier(store, supplier_id)
    return store.evaluations_for(supplier_id)


@router.post("/{supplier_id}/google-sheet", response_model=SheetLinkRead)
async def link_google_sheet(
    supplier_id: str,
    body: SheetLinkRequest,
    store: SupplierStore = Depends(get_store),
):
    """Link a spreadsheet to a supplier."""
    sheet_id = await store.link_google_sheet(supplier_id, body.url)
    return SheetLinkRead(supplier_id=supplier_id, google_sheet_id=sheet_id)
