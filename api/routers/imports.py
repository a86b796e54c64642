"""Supplier import API router."""

import logging

from fastapi import APIRouter, Body, Depends, Request

from api.dependencies import get_store
from api.schemas import RejectedRowRead, SupplierImportRead, SupplierImportRequest
from ingestion.supplier_import import ImportResult, build_suppliers, frame_from_rows, read_csv_rows
from store.app_store import SupplierStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def _import(store: SupplierStore, result: ImportResult) -> SupplierImportRead:
    imported = await store.add_suppliers(result.suppliers)
    if result.rejected:
        logger.info("Supplier import skipped %d invalid rows", len(result.rejected))
    return SupplierImportRead(
        imported=imported,
        rejected=[RejectedRowRead(row=r.row, errors=r.errors) for r in result.rejected],
    )


@router.get("/column-mappings", response_model=dict[str, str])
async def get_column_mappings(store: SupplierStore = Depends(get_store)):
    """Saved source-column -> supplier-field mapping."""
    return store.column_mappings


@router.put("/column-mappings", response_model=dict[str, str])
async def set_column_mappings(body: dict[str, str] = Body(...), store: SupplierStore = Depends(get_store)):
    store.set_column_mappings(body)
    return store.column_mappings


@router.post("/suppliers", response_model=SupplierImportRead, status_code=201)
async def import_suppliers(body: SupplierImportRequest, store: SupplierStore = Depends(get_store)):
    """
    Import parsed rows. Uses the saved column mapping unless the request
    carries its own. All accepted rows are created or none are cached.
    """
    mappings = body.mappings if body.mappings is not None else store.column_mappings
    result = build_suppliers(frame_from_rows(body.rows), mappings)
    return await _import(store, result)


@router.post("/suppliers.csv", response_model=SupplierImportRead, status_code=201)
async def import_suppliers_csv(request: Request, store: SupplierStore = Depends(get_store)):
    """Import a raw CSV body with the saved column mapping."""
    frame = read_csv_rows(await request.body())
    result = build_suppliers(frame, store.column_mappings)
    return await _import(store, result)
