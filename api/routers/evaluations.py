"""Evaluations API router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import get_store
from api.schemas import Evaluation, EvaluationCreate, EvaluationType, EvaluationUpdate
from store.app_store import SupplierStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[Evaluation])
async def list_evaluations(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    supplier_id: Optional[str] = Query(None),
    type: Optional[EvaluationType] = Query(None, description="positive | negative"),
    store: SupplierStore = Depends(get_store),
):
    """List evaluations."""
    evaluations = store.evaluations
    if supplier_id:
        evaluations = [e for e in evaluations if e.supplier_id == supplier_id]
    if type:
        evaluations = [e for e in evaluations if e.type == type]
    return evaluations[offset : offset + limit]


@router.post("", response_model=Evaluation, status_code=201)
async def create_evaluation(body: EvaluationCreate, store: SupplierStore = Depends(get_store)):
    """Record an evaluation; ``ratings.overall`` is derived from the four scores."""
    return await store.add_evaluation(body)


@router.get("/{evaluation_id}", response_model=Evaluation)
async def get_evaluation(evaluation_id: str, store: SupplierStore = Depends(get_store)):
    evaluation = store.get_evaluation(evaluation_id)
    if evaluation is None:
        raise HTTPException(status_code=404, detail="Evaluation not found")
    return evaluation


@router.put("/{evaluation_id}", response_model=Evaluation)
async def update_evaluation(
    evaluation_id: str,
    body: EvaluationUpdate,
    store: SupplierStore = Depends(get_store),
):
    current = store.get_evaluation(evaluation_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Evaluation not found")
    changes = body.model_dump(exclude_unset=True)
    merged = {**current.model_dump(), **changes}
    if "ratings" in changes and "type" not in changes:
        # type follows the new overall score
        merged.pop("type")
    return await store.update_evaluation(Evaluation.model_validate(merged))


@router.delete("/{evaluation_id}", status_code=204)
async def delete_evaluation(evaluation_id: str, store: SupplierStore = Depends(get_store)):
    await store.delete_evaluation(evaluation_id)
    return Response(status_code=204)
