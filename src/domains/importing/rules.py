# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Business rules checked on the parsed document."""

from src.domains.importing.errors import BusinessRuleError
from src.domains.importing.parser import GradeRecord, ImportDocument
from src.domains.importing.validation import (
    GRADE_DECIMAL_PLACES,
    MAX_GRADE,
    MIN_GRADE,
    has_grade_precision,
    is_valid_grade,
)


def validate_business_rules(document: ImportDocument) -> None:
    """Re-check numeric rules on the typed records.

    Args:
        document: Parsed import document.

    Raises:
        BusinessRuleError: Listing every invalid grade with its value.
    """
    errors = [
        message
        for message in (_grade_error(grade) for grade in document.grades)
        if message is not None
    ]

    if errors:
        raise BusinessRuleError(errors)


def _grade_error(grade: GradeRecord) -> str | None:
    if not is_valid_grade(grade.value):
        return f"Invalid grade: {grade.raw_value} (must be between {MIN_GRADE:g} and {MAX_GRADE:g})"
    if not has_grade_precision(grade.raw_value):
        return f"Invalid grade: {grade.raw_value} (at most {GRADE_DECIMAL_PLACES} decimal places)"
    return None
