"""
Supplier store: the single in-memory source of truth for suppliers,
evaluations and non-conformities.

Every mutator awaits its adapter first and only then reconciles the cache in
one synchronous assignment, so a failed remote call never leaks into local
state. Non-conformities are kept in one flat collection; the "nested under
supplier" view is projected on read.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.schemas import (
    NON_CONFORMITY_TRANSITIONS,
    Evaluation,
    EvaluationCreate,
    NonConformity,
    NonConformityCreate,
    Supplier,
    SupplierCreate,
)
from ingestion.sheets import SheetsClient, extract_spreadsheet_id
from persistence.adapters import (
    EvaluationCollection,
    NonConformityCollection,
    RemoteCollection,
    SupplierCollection,
)
from persistence.errors import BatchWriteError, SupplierHubError, ValidationError

logger = logging.getLogger(__name__)


def _replace_or_prepend(items: list[Any], entity: Any) -> list[Any]:
    # New entities go first so the cache stays newest-first, like list_all.
    if any(item.id == entity.id for item in items):
        return [entity if item.id == entity.id else item for item in items]
    return [entity, *items]


def _check_transition(current: NonConformity, new_status: str) -> None:
    if current.status != new_status and new_status not in NON_CONFORMITY_TRANSITIONS[current.status]:
        raise ValidationError(
            f"Non-conformity {current.id} cannot move from {current.status} to {new_status}"
        )


def group_by_supplier(non_conformities: Iterable[NonConformity]) -> dict[str, list[NonConformity]]:
    """Index non-conformities by owning supplier, keeping their order."""
    grouped: dict[str, list[NonConformity]] = defaultdict(list)
    for nc in non_conformities:
        grouped[nc.supplier_id].append(nc)
    return grouped


class SupplierStore:
    """Cache of suppliers, evaluations and non-conformities backed by remote collections."""

    def __init__(
        self,
        suppliers: RemoteCollection,
        evaluations: RemoteCollection,
        non_conformities: RemoteCollection,
        sheets: Optional[SheetsClient] = None,
    ):
        self._supplier_remote = suppliers
        self._evaluation_remote = evaluations
        self._non_conformity_remote = non_conformities
        self._sheets = sheets or SheetsClient()

        self._suppliers: list[Supplier] = []
        self._evaluations: list[Evaluation] = []
        self._non_conformities: list[NonConformity] = []
        self._column_mappings: dict[str, str] = {}
        self._ready = False

    # ── Read model ──────────────────────────────────────────────────────────

    @property
    def is_ready(self) -> bool:
        """False until the first successful ``load_initial_data``."""
        return self._ready

    @property
    def suppliers(self) -> list[Supplier]:
        grouped = group_by_supplier(self._non_conformities)
        return [
            s.model_copy(update={"non_conformities": list(grouped.get(s.id, []))})
            for s in self._suppliers
        ]

    @property
    def evaluations(self) -> list[Evaluation]:
        return list(self._evaluations)

    @property
    def non_conformities(self) -> list[NonConformity]:
        return list(self._non_conformities)

    @property
    def column_mappings(self) -> dict[str, str]:
        return dict(self._column_mappings)

    def get_supplier(self, supplier_id: str) -> Optional[Supplier]:
        for s in self._suppliers:
            if s.id == supplier_id:
                return s.model_copy(update={"non_conformities": self.non_conformities_for(supplier_id)})
        return None

    def get_evaluation(self, evaluation_id: str) -> Optional[Evaluation]:
        return next((e for e in self._evaluations if e.id == evaluation_id), None)

    def get_non_conformity(self, non_conformity_id: str) -> Optional[NonConformity]:
        return next((nc for nc in self._non_conformities if nc.id == non_conformity_id), None)

    def non_conformities_for(self, supplier_id: str) -> list[NonConformity]:
        return [nc for nc in self._non_conformities if nc.supplier_id == supplier_id]

    def evaluations_for(self, supplier_id: str) -> list[Evaluation]:
        return [e for e in self._evaluations if e.supplier_id == supplier_id]

    # ── Loading ─────────────────────────────────────────────────────────────

    async def load_initial_data(self) -> None:
        """Full refresh from the remote collections.

        The three fetches run concurrently and the cache is swapped only once
        all of them succeed.
        """
        suppliers, evaluations, non_conformities = await asyncio.gather(
            self._supplier_remote.list_all(),
            self._evaluation_remote.list_all(),
            self._non_conformity_remote.list_all(),
        )
        self._suppliers, self._evaluations, self._non_conformities, self._ready = (
            suppliers,
            evaluations,
            non_conformities,
            True,
        )
        logger.info(
            "Store loaded: %d suppliers, %d evaluations, %d non-conformities",
            len(suppliers),
            len(evaluations),
            len(non_conformities),
        )

    # ── Suppliers ───────────────────────────────────────────────────────────

    async def add_supplier(self, data: SupplierCreate) -> Supplier:
        created = await self._supplier_remote.create(data)
        self._suppliers = _replace_or_prepend(self._suppliers, created)
        return created

    async def add_suppliers(self, batch: list[SupplierCreate]) -> list[Supplier]:
        """Create a batch concurrently. All-or-nothing for the local cache.

        On any failure the cache is left untouched and BatchWriteError reports
        which entities the remote database accepted anyway.
        """
        if not batch:
            return []
        results = await asyncio.gather(
            *(self._supplier_remote.create(item) for item in batch),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, BaseException)]
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, SupplierHubError):
                raise failure
        if failures:
            logger.warning(
                "Supplier batch rejected: %d of %d creates failed, %d persisted remotely",
                len(failures),
                len(batch),
                len(created),
            )
            raise BatchWriteError(
                f"{len(failures)} of {len(batch)} suppliers could not be created",
                created=created,
                failures=failures,
            ) from failures[0]
        suppliers = self._suppliers
        for s in sorted(created, key=lambda s: s.created_at):
            suppliers = _replace_or_prepend(suppliers, s)
        self._suppliers = suppliers
        logger.info("Imported %d suppliers", len(created))
        return created

    async def update_supplier(self, supplier: Supplier) -> Supplier:
        """Remote update, then full replace of the cached entry with the server's copy."""
        updated = await self._supplier_remote.update(supplier.id, supplier)
        cached = next((s for s in self._suppliers if s.id == supplier.id), None)
        if cached is not None and cached.google_sheet_id:
            # local-only tag, the server never returns it
            updated = updated.model_copy(update={"google_sheet_id": cached.google_sheet_id})
        self._suppliers = _replace_or_prepend(self._suppliers, updated)
        return updated

    async def delete_supplier(self, supplier_id: str) -> None:
        """Remote delete; the supplier's cached evaluations and non-conformities go with it."""
        await self._supplier_remote.delete(supplier_id)
        self._suppliers, self._evaluations, self._non_conformities = (
            [s for s in self._suppliers if s.id != supplier_id],
            [e for e in self._evaluations if e.supplier_id != supplier_id],
            [nc for nc in self._non_conformities if nc.supplier_id != supplier_id],
        )

    # ── Evaluations ─────────────────────────────────────────────────────────

    async def add_evaluation(self, data: EvaluationCreate) -> Evaluation:
        if not data.supplier_id.strip():
            raise ValidationError("An evaluation needs a supplier")
        created = await self._evaluation_remote.create(data)
        self._evaluations = _replace_or_prepend(self._evaluations, created)
        return created

    async def update_evaluation(self, evaluation: Evaluation) -> Evaluation:
        updated = await self._evaluation_remote.update(evaluation.id, evaluation)
        self._evaluations = _replace_or_prepend(self._evaluations, updated)
        return updated

    async def delete_evaluation(self, evaluation_id: str) -> None:
        await self._evaluation_remote.delete(evaluation_id)
        self._evaluations = [e for e in self._evaluations if e.id != evaluation_id]

    # ── Non-conformities ────────────────────────────────────────────────────

    async def add_non_conformity(self, data: NonConformityCreate) -> NonConformity:
        if not data.supplier_id.strip():
            raise ValidationError("A non-conformity needs a supplier")
        created = await self._non_conformity_remote.create(data)
        self._non_conformities = _replace_or_prepend(self._non_conformities, created)
        if not any(s.id == created.supplier_id for s in self._suppliers):
            logger.info(
                "Non-conformity %s belongs to supplier %s, which is not cached yet",
                created.id,
                created.supplier_id,
            )
        return created

    async def update_non_conformity(self, non_conformity: NonConformity) -> NonConformity:
        if not non_conformity.supplier_id.strip():
            raise ValidationError("A non-conformity needs a supplier")
        current = self.get_non_conformity(non_conformity.id)
        if current is not None:
            _check_transition(current, non_conformity.status)
        updated = await self._non_conformity_remote.update(non_conformity.id, non_conformity)
        self._non_conformities = _replace_or_prepend(self._non_conformities, updated)
        return updated

    async def resolve_non_conformity(self, non_conformity_id: str, resolution: str) -> NonConformity:
        current = await self._current_non_conformity(non_conformity_id)
        _check_transition(current, "resolved")
        return await self.update_non_conformity(
            current.model_copy(
                update={
                    "status": "resolved",
                    "resolution": resolution,
                    "resolution_date": datetime.now(timezone.utc),
                }
            )
        )

    async def escalate_non_conformity(self, non_conformity_id: str, reason: str) -> NonConformity:
        current = await self._current_non_conformity(non_conformity_id)
        _check_transition(current, "escalated")
        return await self.update_non_conformity(
            current.model_copy(update={"status": "escalated", "escalation_reason": reason})
        )

    async def delete_non_conformity(self, non_conformity_id: str) -> None:
        await self._non_conformity_remote.delete(non_conformity_id)
        self._non_conformities = [nc for nc in self._non_conformities if nc.id != non_conformity_id]

    async def _current_non_conformity(self, non_conformity_id: str) -> NonConformity:
        cached = self.get_non_conformity(non_conformity_id)
        if cached is not None:
            return cached
        return await self._non_conformity_remote.get_by_id(non_conformity_id)

    # ── Import mappings and sheet linking ───────────────────────────────────

    def set_column_mappings(self, mappings: Mapping[str, str]) -> None:
        """Replace the saved source-column -> supplier-field mapping (local only)."""
        self._column_mappings = dict(mappings)

    async def link_google_sheet(self, supplier_id: str, sheet_url: str) -> str:
        """Fetch the linked spreadsheet's records and tag the cached supplier with its id."""
        spreadsheet_id = extract_spreadsheet_id(sheet_url)
        if not any(s.id == supplier_id for s in self._suppliers):
            raise ValidationError(f"Supplier {supplier_id} is not loaded")
        await asyncio.gather(
            self._sheets.fetch_employee_data(spreadsheet_id),
            self._sheets.fetch_goals(spreadsheet_id),
            self._sheets.fetch_competencies(spreadsheet_id),
            self._sheets.fetch_feedbacks(spreadsheet_id),
        )
        self._suppliers = [
            s.model_copy(update={"google_sheet_id": spreadsheet_id}) if s.id == supplier_id else s
            for s in self._suppliers
        ]
        logger.info("Linked sheet %s to supplier %s", spreadsheet_id, supplier_id)
        return spreadsheet_id


def build_store(
    session_factory: async_sessionmaker[AsyncSession],
    sheets: Optional[SheetsClient] = None,
) -> SupplierStore:
    """Store wired to the three database-backed collections."""
    return SupplierStore(
        suppliers=SupplierCollection(session_factory),
        evaluations=EvaluationCollection(session_factory),
        non_conformities=NonConformityCollection(session_factory),
        sheets=sheets,
    )
