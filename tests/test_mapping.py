"""Unit tests for the wire <-> model field mapping, no DB required."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import inspect

from api.schemas import Supplier
from persistence.errors import RemoteReadError
from persistence.mapping import EVALUATION_MAPPING, NON_CONFORMITY_MAPPING, SUPPLIER_MAPPING

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _supplier_row(**overrides):
    row = {
        "id": "sup-1",
        "name": "Acme",
        "legal_name": "Acme Industrial Ltda",
        "document_number": "123",
        "category": "raw_materials",
        "email": "sales@acme.example.com",
        "phone": "555",
        "whatsapp": None,
        "address": None,
        "location_url": None,
        "average_rating": None,
        "last_evaluation": None,
        "status": None,
        "custom_fields": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def test_supplier_read_applies_defaults():
    supplier = SUPPLIER_MAPPING.to_model(_supplier_row())
    assert supplier.status == "active"
    assert supplier.average_rating == 0.0
    assert supplier.custom_fields == {}
    assert supplier.whatsapp is None


def test_supplier_read_zeroes_metrics_and_collections():
    supplier = SUPPLIER_MAPPING.to_model(_supplier_row())
    assert supplier.metrics.delivery_rate == 0.0
    assert supplier.metrics.total_evaluations == 0
    assert supplier.metrics.last_updated is None
    assert supplier.metrics.historical_data == []
    assert supplier.non_conformities == []
    assert supplier.recommendations == []
    assert supplier.documents == []


def test_supplier_read_is_deterministic():
    row = _supplier_row()
    assert SUPPLIER_MAPPING.to_model(row) == SUPPLIER_MAPPING.to_model(row)


def test_supplier_write_omits_readonly_and_empty_sparse_fields():
    supplier = SUPPLIER_MAPPING.to_model(_supplier_row(address="", whatsapp=None))
    payload = SUPPLIER_MAPPING.to_wire(supplier)
    for column in ("id", "created_at", "updated_at", "whatsapp", "address", "location_url",
                   "last_evaluation", "custom_fields"):
        assert column not in payload
    assert payload["name"] == "Acme"
    assert payload["status"] == "active"
    assert "metrics" not in payload
    assert "non_conformities" not in payload


def test_supplier_write_includes_present_sparse_fields():
    supplier = SUPPLIER_MAPPING.to_model(
        _supplier_row(whatsapp="5511999", custom_fields={"erp_code": "A-1"})
    )
    payload = SUPPLIER_MAPPING.to_wire(supplier)
    assert payload["whatsapp"] == "5511999"
    assert payload["custom_fields"] == {"erp_code": "A-1"}


def test_partial_write_only_carries_given_keys():
    payload = SUPPLIER_MAPPING.to_wire({"status": "blocked"})
    assert payload == {"status": "blocked"}


def test_malformed_row_raises_read_error():
    with pytest.raises(RemoteReadError):
        SUPPLIER_MAPPING.to_model(_supplier_row(name=None))


def test_evaluation_comments_default_and_overall_recomputed():
    evaluation = EVALUATION_MAPPING.to_model({
        "id": "ev-1",
        "supplier_id": "sup-1",
        "evaluator": "buyer",
        "date": NOW,
        "ratings": {"quality": 4, "price": 3, "delivery": 5, "communication": 4, "overall": 1},
        "comments": None,
        "type": "positive",
        "created_at": NOW,
    })
    assert evaluation.comments == ""
    assert evaluation.ratings.overall == pytest.approx(4.0)
    assert evaluation.attachments == []
    assert evaluation.purchase_order_number == ""


def test_evaluation_write_skips_unpersisted_fields():
    evaluation = EVALUATION_MAPPING.to_model({
        "id": "ev-1",
        "supplier_id": "sup-1",
        "evaluator": "buyer",
        "date": NOW,
        "ratings": {"quality": 4, "price": 4, "delivery": 4, "communication": 4},
        "comments": "ok",
        "type": "positive",
        "created_at": NOW,
    })
    payload = EVALUATION_MAPPING.to_wire(evaluation)
    assert "purchase_order_number" not in payload
    assert "attachments" not in payload
    assert payload["ratings"]["overall"] == pytest.approx(4.0)


def test_non_conformity_sparse_resolution_fields():
    nc = NON_CONFORMITY_MAPPING.to_model({
        "id": "nc-1",
        "supplier_id": "sup-1",
        "type": "quality",
        "severity": "low",
        "description": "Scratched",
        "reported_date": NOW,
        "status": "open",
        "resolution_deadline": NOW,
        "resolution_date": None,
        "resolution": None,
        "escalation_reason": None,
        "impact": None,
        "created_at": NOW,
        "updated_at": NOW,
    })
    assert nc.impact == ""
    payload = NON_CONFORMITY_MAPPING.to_wire(nc)
    assert "resolution" not in payload
    assert "resolution_date" not in payload
    assert "escalation_reason" not in payload
    assert payload["impact"] == ""


def test_column_for_unknown_attribute():
    assert SUPPLIER_MAPPING.column_for("category") == "category"
    assert SUPPLIER_MAPPING.column_for("metrics") is None


def test_model_serializes_camel_case():
    supplier = SUPPLIER_MAPPING.to_model(_supplier_row())
    dumped = supplier.model_dump(by_alias=True)
    assert "legalName" in dumped
    assert "documentNumber" in dumped
    assert isinstance(Supplier.model_validate(dumped), Supplier)


@pytest.mark.parametrize("mapping", [SUPPLIER_MAPPING, EVALUATION_MAPPING, NON_CONFORMITY_MAPPING])
def test_every_wire_field_is_a_table_column(mapping):
    columns = {attr.key for attr in inspect(mapping.table).column_attrs}
    assert {f.wire for f in mapping.fields} <= columns
