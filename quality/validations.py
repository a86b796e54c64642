"""
Data quality checks for tabular supplier imports.

Great Expectations-style column checks over a pandas DataFrame. Checks never
raise: a broken check comes back as a failed ValidationResult.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

SUPPLIER_STATUSES = {"active", "inactive", "blocked", "temporarily_blocked"}
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


@dataclass
class ValidationResult:
    """Result of a single validation check."""

    rule: str
    passed: bool
    failed_count: int = 0
    total_count: int = 0
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


def _blank(series):
    return series.isna() | (series.astype(str).str.strip() == "")


def validate_not_blank(df, column: str) -> ValidationResult:
    """Expect column values to be present and non-blank."""
    try:
        total = len(df)
        blanks = int(_blank(df[column]).sum())
        passed = blanks == 0
        return ValidationResult(
            rule=f"expect_{column}_not_blank",
            passed=passed,
            failed_count=blanks,
            total_count=total,
            message=f"{blanks} blank values in {column}" if not passed else "OK",
        )
    except Exception as e:
        return ValidationResult(rule=f"expect_{column}_not_blank", passed=False, message=str(e))


def validate_in_set(df, column: str, value_set: set) -> ValidationResult:
    """Expect non-blank column values to be in allowed set."""
    try:
        values = df.loc[~_blank(df[column]), column]
        invalid = ~values.isin(value_set)
        failed = int(invalid.sum())
        passed = failed == 0
        return ValidationResult(
            rule=f"expect_{column}_in_set",
            passed=passed,
            failed_count=failed,
            total_count=len(df),
            message=f"{failed} invalid values" if not passed else "OK",
            details={"allowed": sorted(value_set), "invalid_sample": values[invalid].head(5).tolist()},
        )
    except Exception as e:
        return ValidationResult(rule=f"expect_{column}_in_set", passed=False, message=str(e))


def validate_unique(df, column: str) -> ValidationResult:
    """Expect non-blank column values to appear once."""
    try:
        values = df.loc[~_blank(df[column]), column].astype(str).str.strip()
        dupes = values[values.duplicated(keep=False)]
        failed = int(len(dupes))
        passed = failed == 0
        return ValidationResult(
            rule=f"expect_{column}_unique",
            passed=passed,
            failed_count=failed,
            total_count=len(df),
            message=f"{failed} duplicated values" if not passed else "OK",
            details={"duplicates": sorted(set(dupes.tolist()))[:5]},
        )
    except Exception as e:
        return ValidationResult(rule=f"expect_{column}_unique", passed=False, message=str(e))


def validate_matches(df, column: str, pattern: str) -> ValidationResult:
    """Expect non-blank column values to match a regex."""
    try:
        values = df.loc[~_blank(df[column]), column].astype(str).str.strip()
        invalid = ~values.str.match(pattern)
        failed = int(invalid.sum())
        passed = failed == 0
        return ValidationResult(
            rule=f"expect_{column}_format",
            passed=passed,
            failed_count=failed,
            total_count=len(df),
            message=f"{failed} malformed values" if not passed else "OK",
        )
    except Exception as e:
        return ValidationResult(rule=f"expect_{column}_format", passed=False, message=str(e))


def run_validation_suite(df, suite: str = "suppliers") -> list[ValidationResult]:
    """Run a validation suite over a mapped import frame."""
    results: list[ValidationResult] = []
    if suite == "suppliers":
        for column in ("name", "legal_name", "document_number", "email", "phone"):
            if column in df.columns:
                results.append(validate_not_blank(df, column))
        if "document_number" in df.columns:
            results.append(validate_unique(df, "document_number"))
        if "email" in df.columns:
            results.append(validate_matches(df, "email", EMAIL_PATTERN))
        if "status" in df.columns:
            results.append(validate_in_set(df, "status", SUPPLIER_STATUSES))
    failed = [r.rule for r in results if not r.passed]
    if failed:
        logger.warning("Validation suite %s: %d check(s) failed: %s", suite, len(failed), failed)
    return results
