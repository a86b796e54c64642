"""
Remote persistence adapters: one per collection, one generic implementation.

Every operation runs in its own session, translates through the entity's
field-mapping table, and converts database failures into the persistence
error taxonomy. Nothing is swallowed; nothing is retried.
"""

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.database import session_scope
from api.schemas import Evaluation, NonConformity, Supplier
from persistence.errors import RemoteNotFoundError, RemoteReadError, RemoteWriteError, ValidationError
from persistence.mapping import (
    EVALUATION_MAPPING,
    NON_CONFORMITY_MAPPING,
    SUPPLIER_MAPPING,
    EntityMapping,
)

logger = logging.getLogger(__name__)

# Driver-level connection failures are not always wrapped by SQLAlchemy.
BACKEND_ERRORS = (SQLAlchemyError, OSError)


def _as_row(record: Any) -> dict[str, Any]:
    return {attr.key: getattr(record, attr.key) for attr in inspect(record).mapper.column_attrs}


class RemoteCollection:
    """CRUD and equality queries against one remote table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], mapping: EntityMapping):
        self._session_factory = session_factory
        self.mapping = mapping
        self.table = mapping.table

    async def list_all(self) -> list[Any]:
        """All records, newest first."""
        return await self._select()

    async def list_by_field(self, field_name: str, value: Any) -> list[Any]:
        """Records whose ``field_name`` equals ``value``, newest first."""
        column = self.mapping.column_for(field_name)
        if column is None:
            raise ValidationError(f"{self.mapping.name} has no stored field '{field_name}'")
        return await self._select(getattr(self.table, column) == value)

    async def get_by_id(self, entity_id: str) -> Any:
        try:
            async with session_scope(self._session_factory) as db:
                record = await db.get(self.table, entity_id)
                row = _as_row(record) if record is not None else None
        except BACKEND_ERRORS as exc:
            logger.exception("Failed to fetch %s %s", self.mapping.name, entity_id)
            raise RemoteReadError(f"Could not fetch {self.mapping.name} {entity_id}") from exc
        if row is None:
            raise RemoteNotFoundError(self.mapping.name, entity_id)
        return self.mapping.to_model(row)

    async def create(self, data: Union[BaseModel, Mapping[str, Any]]) -> Any:
        """Insert one record; the returned entity carries the server-assigned id and timestamps."""
        payload = self.mapping.to_wire(data)
        try:
            async with session_scope(self._session_factory) as db:
                record = self.table(**payload)
                db.add(record)
                await db.flush()
                await db.refresh(record)
                row = _as_row(record)
        except BACKEND_ERRORS as exc:
            logger.exception("Failed to create %s", self.mapping.name)
            raise RemoteWriteError(f"Could not create {self.mapping.name}: {exc.__class__.__name__}") from exc
        logger.info("Created %s %s", self.mapping.name, row["id"])
        return self.mapping.to_model(row)

    async def update(self, entity_id: str, changes: Union[BaseModel, Mapping[str, Any]]) -> Any:
        """Apply ``changes`` (sparse) and return the full post-update record."""
        payload = self.mapping.to_wire(changes)
        try:
            async with session_scope(self._session_factory) as db:
                record = await db.get(self.table, entity_id)
                if record is None:
                    raise RemoteNotFoundError(self.mapping.name, entity_id)
                for column, value in payload.items():
                    setattr(record, column, value)
                await db.flush()
                await db.refresh(record)
                row = _as_row(record)
        except BACKEND_ERRORS as exc:
            logger.exception("Failed to update %s %s", self.mapping.name, entity_id)
            raise RemoteWriteError(f"Could not update {self.mapping.name} {entity_id}") from exc
        return self.mapping.to_model(row)

    async def delete(self, entity_id: str) -> None:
        """Delete by id. A missing id is an error, not a no-op."""
        try:
            async with session_scope(self._session_factory) as db:
                record = await db.get(self.table, entity_id)
                if record is None:
                    raise RemoteNotFoundError(self.mapping.name, entity_id)
                await db.delete(record)
        except BACKEND_ERRORS as exc:
            logger.exception("Failed to delete %s %s", self.mapping.name, entity_id)
            raise RemoteWriteError(f"Could not delete {self.mapping.name} {entity_id}") from exc
        logger.info("Deleted %s %s", self.mapping.name, entity_id)

    async def _select(self, clause: Optional[Any] = None) -> list[Any]:
        q = select(self.table).order_by(self.table.created_at.desc())
        if clause is not None:
            q = q.where(clause)
        try:
            async with session_scope(self._session_factory) as db:
                result = await db.execute(q)
                rows = [_as_row(r) for r in result.scalars().all()]
        except BACKEND_ERRORS as exc:
            logger.exception("Failed to list %s records", self.mapping.name)
            raise RemoteReadError(f"Could not fetch {self.mapping.name} records") from exc
        return [self.mapping.to_model(r) for r in rows]


class SupplierCollection(RemoteCollection):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(session_factory, SUPPLIER_MAPPING)

    async def list_by_category(self, category: str) -> list[Supplier]:
        return await self.list_by_field("category", category)

    async def list_by_status(self, status: str) -> list[Supplier]:
        return await self.list_by_field("status", status)


class EvaluationCollection(RemoteCollection):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(session_factory, EVALUATION_MAPPING)

    async def list_by_supplier(self, supplier_id: str) -> list[Evaluation]:
        return await self.list_by_field("supplier_id", supplier_id)

    async def list_by_type(self, evaluation_type: str) -> list[Evaluation]:
        return await self.list_by_field("type", evaluation_type)


class NonConformityCollection(RemoteCollection):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(session_factory, NON_CONFORMITY_MAPPING)

    async def list_by_supplier(self, supplier_id: str) -> list[NonConformity]:
        return await self.list_by_field("supplier_id", supplier_id)

    async def list_by_status(self, status: str) -> list[NonConformity]:
        return await self.list_by_field("status", status)

    async def list_by_severity(self, severity: str) -> list[NonConformity]:
        return await self.list_by_field("severity", severity)
