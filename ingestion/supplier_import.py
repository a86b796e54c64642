"""
Supplier import: tabular rows + column mapping -> supplier create-inputs.

The presentation layer (or a script) supplies parsed rows from a spreadsheet
or CSV together with a source-column -> supplier-field mapping. Columns mapped
to a field the supplier does not have are kept as custom fields. Rows that
fail validation are reported back instead of being dropped.
"""

import io
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from api.schemas import SupplierCreate
from persistence.errors import ValidationError
from quality.validations import ValidationResult, run_validation_suite

logger = logging.getLogger(__name__)

SUPPLIER_FIELDS = (
    "name",
    "legal_name",
    "document_number",
    "category",
    "email",
    "phone",
    "whatsapp",
    "address",
    "location_url",
    "status",
)
REQUIRED_FIELDS = ("name", "legal_name", "document_number", "email", "phone")
DEFAULT_CATEGORY = os.getenv("IMPORT_DEFAULT_CATEGORY", "uncategorized")


@dataclass
class RejectedRow:
    row: int  # 1-based data row, header excluded
    errors: list[str]


@dataclass
class ImportResult:
    suppliers: list[SupplierCreate] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)
    validations: list[ValidationResult] = field(default_factory=list)


def read_csv_rows(source: Any) -> pd.DataFrame:
    """Read a CSV path, buffer or raw bytes, keeping every cell as text.

    Undecodable or unparseable input raises ValidationError.
    """
    try:
        if isinstance(source, bytes):
            source = io.StringIO(source.decode("utf-8-sig"))
        return pd.read_csv(source, dtype=str, keep_default_na=False)
    except UnicodeDecodeError as exc:
        raise ValidationError("CSV body is not UTF-8 text") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise ValidationError(f"Could not parse CSV: {exc}") from exc


def frame_from_rows(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(list(rows), dtype=object)
    return df.fillna("").astype(str)


def missing_required_mappings(mappings: Mapping[str, str]) -> list[str]:
    """Required supplier fields no source column is mapped to."""
    targets = {t for t in mappings.values() if t}
    return [f for f in REQUIRED_FIELDS if f not in targets]


def map_columns(frame: pd.DataFrame, mappings: Mapping[str, str]) -> pd.DataFrame:
    """Keep mapped source columns and rename them to their target fields."""
    used = {src: tgt for src, tgt in mappings.items() if tgt and src in frame.columns}
    targets = list(used.values())
    duplicated = sorted({t for t in targets if targets.count(t) > 1})
    if duplicated:
        raise ValidationError(f"Several columns are mapped to: {', '.join(duplicated)}")
    return frame[list(used)].rename(columns=used)


def _row_errors(record: dict[str, str]) -> list[str]:
    return [f"{f}: required" for f in REQUIRED_FIELDS if not record.get(f, "").strip()]


def build_suppliers(frame: pd.DataFrame, mappings: Mapping[str, str]) -> ImportResult:
    """Turn mapped rows into SupplierCreate inputs.

    Raises ValidationError when a required field has no mapped column; per-row
    problems end up in ``ImportResult.rejected``.
    """
    missing = missing_required_mappings(mappings)
    if missing:
        raise ValidationError(f"Required fields are not mapped: {', '.join(missing)}")

    mapped = map_columns(frame, mappings)
    result = ImportResult(validations=run_validation_suite(mapped, suite="suppliers"))

    for i, record in enumerate(mapped.to_dict(orient="records"), start=1):
        record = {k: str(v).strip() for k, v in record.items()}
        errors = _row_errors(record)
        if errors:
            result.rejected.append(RejectedRow(row=i, errors=errors))
            continue
        known = {k: v for k, v in record.items() if k in SUPPLIER_FIELDS and v}
        known.setdefault("category", DEFAULT_CATEGORY)
        custom = {k: v for k, v in record.items() if k not in SUPPLIER_FIELDS and v}
        try:
            result.suppliers.append(SupplierCreate(**known, custom_fields=custom))
        except PydanticValidationError as exc:
            result.rejected.append(
                RejectedRow(
                    row=i,
                    errors=[f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()],
                )
            )

    logger.info(
        "Import mapped %d rows: %d accepted, %d rejected",
        len(mapped),
        len(result.suppliers),
        len(result.rejected),
    )
    return result
