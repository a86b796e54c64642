"""Unit tests for the import data-quality checks."""

import pandas as pd

from quality.validations import (
    EMAIL_PATTERN,
    SUPPLIER_STATUSES,
    run_validation_suite,
    validate_in_set,
    validate_matches,
    validate_not_blank,
    validate_unique,
)


def test_not_blank_counts_whitespace():
    df = pd.DataFrame({"name": ["Acme", "  ", None]})
    result = validate_not_blank(df, "name")
    assert not result.passed
    assert result.failed_count == 2
    assert result.total_count == 3


def test_in_set_ignores_blanks():
    df = pd.DataFrame({"status": ["active", "", "gone"]})
    result = validate_in_set(df, "status", SUPPLIER_STATUSES)
    assert result.failed_count == 1
    assert result.details["invalid_sample"] == ["gone"]


def test_unique_and_email_format():
    df = pd.DataFrame({
        "document_number": ["1", "2", "1"],
        "email": ["a@example.com", "not-an-email", ""],
    })
    assert validate_unique(df, "document_number").failed_count == 2
    assert validate_matches(df, "email", EMAIL_PATTERN).failed_count == 1


def test_missing_column_returns_failed_result():
    result = validate_not_blank(pd.DataFrame({"a": [1]}), "name")
    assert not result.passed
    assert result.rule == "expect_name_not_blank"


def test_supplier_suite_skips_absent_columns():
    df = pd.DataFrame({"name": ["Acme"], "email": ["a@example.com"]})
    rules = [r.rule for r in run_validation_suite(df)]
    assert rules == ["expect_name_not_blank", "expect_email_not_blank", "expect_email_format"]
    assert all(r.passed for r in run_validation_suite(df))
