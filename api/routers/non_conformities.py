"""Non-conformities API router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import get_store
from api.schemas import (
    EscalateRequest,
    NonConformity,
    NonConformityCreate,
    NonConformityStatus,
    NonConformityUpdate,
    ResolveRequest,
    Severity,
)
from store.app_store import SupplierStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[NonConformity])
async def list_non_conformities(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    supplier_id: Optional[str] = Query(None),
    status: Optional[NonConformityStatus] = Query(None),
    severity: Optional[Severity] = Query(None),
    store: SupplierStore = Depends(get_store),
):
    """List non-conformities."""
    items = store.non_conformities
    if supplier_id:
        items = [nc for nc in items if nc.supplier_id == supplier_id]
    if status:
        items = [nc for nc in items if nc.status == status]
    if severity:
        items = [nc for nc in items if nc.severity == severity]
    return items[offset : offset + limit]


@router.post("", response_model=NonConformity, status_code=201)
async def create_non_conformity(body: NonConformityCreate, store: SupplierStore = Depends(get_store)):
    """Report a non-conformity. It opens with the default resolution deadline unless one is given."""
    return await store.add_non_conformity(body)


@router.get("/{non_conformity_id}", response_model=NonConformity)
async def get_non_conformity(non_conformity_id: str, store: SupplierStore = Depends(get_store)):
    nc = store.get_non_conformity(non_conformity_id)
    if nc is None:
        raise HTTPException(status_code=404, detail="Non-conformity not found")
    return nc


@router.put("/{non_conformity_id}", response_model=NonConformity)
async def update_non_conformity(
    non_conformity_id: str,
    body: NonConformityUpdate,
    store: SupplierStore = Depends(get_store),
):
    current = store.get_non_conformity(non_conformity_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Non-conformity not found")
    merged = NonConformity.model_validate({**current.model_dump(), **body.model_dump(exclude_unset=True)})
    return await store.update_non_conformity(merged)


@router.post("/{non_conformity_id}/resolve", response_model=NonConformity)
async def resolve_non_conformity(
    non_conformity_id: str,
    body: ResolveRequest,
    store: SupplierStore = Depends(get_store),
):
    return await store.resolve_non_conformity(non_conformity_id, body.resolution)


@router.post("/{non_conformity_id}/escalate", response_model=NonConformity)
async def escalate_non_conformity(
    non_conformity_id: str,
    body: EscalateRequest,
    store: SupplierStore = Depends(get_store),
):
    return await store.escalate_non_conformity(non_conformity_id, body.reason)


@router.delete("/{non_conformity_id}", status_code=204)
async def delete_non_conformity(non_conformity_id: str, store: SupplierStore = Depends(get_store)):
    await store.delete_non_conformity(non_conformity_id)
    return Response(status_code=204)
