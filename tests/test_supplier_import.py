"""Unit tests for the supplier import helpers, no DB required."""

import io

import pandas as pd
import pytest

from ingestion.supplier_import import (
    build_suppliers,
    frame_from_rows,
    map_columns,
    missing_required_mappings,
    read_csv_rows,
)
from persistence.errors import ValidationError

MAPPINGS = {
    "Nome": "name",
    "Razao Social": "legal_name",
    "CNPJ": "document_number",
    "Categoria": "category",
    "E-mail": "email",
    "Telefone": "phone",
    "Codigo ERP": "erp_code",
}

CSV = """Nome,Razao Social,CNPJ,Categoria,E-mail,Telefone,Codigo ERP,Ignored
Acme,Acme Industrial Ltda,111,raw_materials,sales@acme.example.com,555,A-1,x
Beta,Beta SA,222,,contact@beta.example.com,556,,y
,Nameless Ltda,333,packaging,n@example.com,557,,z
"""


def test_read_csv_rows_keeps_text():
    df = read_csv_rows(io.StringIO(CSV))
    assert df.loc[0, "CNPJ"] == "111"
    assert df.loc[1, "Categoria"] == ""


def test_missing_required_mappings():
    assert missing_required_mappings(MAPPINGS) == []
    partial = {k: v for k, v in MAPPINGS.items() if v != "email"}
    assert missing_required_mappings(partial) == ["email"]


def test_unmapped_required_field_raises():
    partial = {k: v for k, v in MAPPINGS.items() if v != "phone"}
    with pytest.raises(ValidationError, match="phone"):
        build_suppliers(read_csv_rows(io.StringIO(CSV)), partial)


def test_duplicate_targets_raise():
    df = pd.DataFrame({"A": ["x"], "B": ["y"]})
    with pytest.raises(ValidationError):
        map_columns(df, {"A": "name", "B": "name"})


def test_build_suppliers_accepts_and_rejects_rows():
    result = build_suppliers(read_csv_rows(io.StringIO(CSV)), MAPPINGS)

    assert [s.name for s in result.suppliers] == ["Acme", "Beta"]
    acme, beta = result.suppliers
    assert acme.custom_fields == {"erp_code": "A-1"}
    assert beta.custom_fields == {}
    assert beta.category == "uncategorized"
    assert acme.status == "active"

    assert len(result.rejected) == 1
    assert result.rejected[0].row == 3
    assert result.rejected[0].errors == ["name: required"]


def test_build_suppliers_reports_invalid_status():
    rows = [{
        "Nome": "Acme",
        "Razao Social": "Acme Ltda",
        "CNPJ": "1",
        "E-mail": "a@example.com",
        "Telefone": "1",
        "Situacao": "archived",
    }]
    mappings = {**MAPPINGS, "Situacao": "status"}
    result = build_suppliers(frame_from_rows(rows), mappings)
    assert result.suppliers == []
    assert result.rejected[0].row == 1
    assert any("status" in e for e in result.rejected[0].errors)
    status_check = next(v for v in result.validations if v.rule == "expect_status_in_set")
    assert not status_check.passed


def test_frame_from_rows_fills_missing_cells():
    df = frame_from_rows([{"a": "1"}, {"b": 2}])
    assert df.loc[0, "b"] == ""
    assert df.loc[1, "b"] == "2"


def test_validation_suite_flags_duplicate_documents():
    rows = [
        {"Nome": "A", "Razao Social": "A", "CNPJ": "1", "E-mail": "a@example.com", "Telefone": "1"},
        {"Nome": "B", "Razao Social": "B", "CNPJ": "1", "E-mail": "b@example.com", "Telefone": "2"},
    ]
    result = build_suppliers(frame_from_rows(rows), MAPPINGS)
    unique = next(v for v in result.validations if v.rule == "expect_document_number_unique")
    assert not unique.passed
    assert unique.failed_count == 2
    assert len(result.suppliers) == 2


def test_read_csv_rows_accepts_bytes_with_bom():
    df = read_csv_rows("\ufeffNome,CNPJ\nAcme,111\n".encode("utf-8"))
    assert list(df.columns) == ["Nome", "CNPJ"]
    assert df.loc[0, "CNPJ"] == "111"


@pytest.mark.parametrize("body", [b"", b"\xff\xfe\xfa,a\n"])
def test_read_csv_rows_rejects_unreadable_input(body):
    with pytest.raises(ValidationError):
        read_csv_rows(body)
