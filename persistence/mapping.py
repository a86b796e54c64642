"""
Declarative wire <-> in-memory field mapping.

Each entity gets one table of FieldMap rows consumed by a single generic
translator. Rules per row:

- read: wire value, or the row default when the column is NULL/missing
- write: skipped for read-only columns (server-assigned id and timestamps);
  sparse rows are written only when the value is present and non-empty

Model fields without a row (metrics, nested collections, attachments) are
filled by the model's own defaults on read and never written.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from api.models import Base, EvaluationRecord, NonConformityRecord, SupplierRecord
from api.schemas import Evaluation, NonConformity, Supplier
from persistence.errors import RemoteReadError

_MISSING = object()


@dataclass(frozen=True)
class FieldMap:
    """One wire column and the in-memory attribute it feeds."""

    wire: str
    attr: str = ""
    default: Any = None
    default_factory: Optional[Callable[[], Any]] = None
    sparse: bool = False
    readonly: bool = False

    @property
    def target(self) -> str:
        return self.attr or self.wire

    def read_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (dict, list)) and not value)


@dataclass(frozen=True)
class EntityMapping:
    """Field-mapping table for one remote collection."""

    name: str
    table: type[Base]
    model: type[BaseModel]
    fields: tuple[FieldMap, ...]

    def column_for(self, attr: str) -> Optional[str]:
        """Wire column backing an in-memory attribute, or None when unmapped."""
        for f in self.fields:
            if f.target == attr:
                return f.wire
        return None

    def to_model(self, row: Mapping[str, Any]) -> BaseModel:
        """Translate a flat wire row into the in-memory shape."""
        data: dict[str, Any] = {}
        for f in self.fields:
            value = row.get(f.wire)
            data[f.target] = f.read_default() if value is None else value
        try:
            return self.model.model_validate(data)
        except PydanticValidationError as exc:
            raise RemoteReadError(
                f"Malformed {self.name} record {row.get('id', '?')}: {exc.error_count()} invalid field(s)"
            ) from exc

    def to_wire(self, entity: Union[BaseModel, Mapping[str, Any]]) -> dict[str, Any]:
        """Translate an in-memory entity (or a partial attribute dict) into a write payload."""
        if isinstance(entity, BaseModel):
            values = entity.model_dump()
        else:
            values = {
                k: v.model_dump() if isinstance(v, BaseModel) else v
                for k, v in entity.items()
            }
        payload: dict[str, Any] = {}
        for f in self.fields:
            if f.readonly:
                continue
            value = values.get(f.target, _MISSING)
            if value is _MISSING:
                continue
            if f.sparse and _is_empty(value):
                continue
            payload[f.wire] = value
        return payload


SUPPLIER_MAPPING = EntityMapping(
    name="supplier",
    table=SupplierRecord,
    model=Supplier,
    fields=(
        FieldMap("id", readonly=True),
        FieldMap("name"),
        FieldMap("legal_name"),
        FieldMap("document_number"),
        FieldMap("category"),
        FieldMap("email"),
        FieldMap("phone"),
        FieldMap("whatsapp", sparse=True),
        FieldMap("address", sparse=True),
        FieldMap("location_url", sparse=True),
        FieldMap("average_rating", default=0.0),
        FieldMap("last_evaluation", sparse=True),
        FieldMap("status", default="active"),
        FieldMap("custom_fields", default_factory=dict, sparse=True),
        FieldMap("created_at", readonly=True),
        FieldMap("updated_at", readonly=True),
    ),
)

EVALUATION_MAPPING = EntityMapping(
    name="evaluation",
    table=EvaluationRecord,
    model=Evaluation,
    fields=(
        FieldMap("id", readonly=True),
        FieldMap("supplier_id"),
        FieldMap("evaluator"),
        FieldMap("date"),
        FieldMap("ratings"),
        FieldMap("comments", default=""),
        FieldMap("type"),
        FieldMap("created_at", readonly=True),
    ),
)

NON_CONFORMITY_MAPPING = EntityMapping(
    name="non-conformity",
    table=NonConformityRecord,
    model=NonConformity,
    fields=(
        FieldMap("id", readonly=True),
        FieldMap("supplier_id"),
        FieldMap("type"),
        FieldMap("severity"),
        FieldMap("description"),
        FieldMap("reported_date"),
        FieldMap("status"),
        FieldMap("resolution_deadline"),
        FieldMap("resolution_date", sparse=True),
        FieldMap("resolution", sparse=True),
        FieldMap("escalation_reason", sparse=True),
        FieldMap("impact", default=""),
        FieldMap("created_at", readonly=True),
        FieldMap("updated_at", readonly=True),
    ),
)
