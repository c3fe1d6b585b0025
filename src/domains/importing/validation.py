# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structural validation of import documents.

The validator never stops at the first problem: every missing section,
missing field and out-of-range grade is reported in one pass so the
uploader can fix the file in one go. Only a document that is not
well-formed XML short-circuits, with a single parse error.
"""

import logging
from decimal import Decimal, InvalidOperation

from src.domains.importing.parser import (
    COURSE_SECTION,
    GRADE_SECTION,
    ROOT_TAG,
    SECTIONS,
    XmlParseError,
    child_text,
    load_root,
    parse_number,
    parse_whole_number,
    section_items,
)
from src.models.importing import ValidationResult

logger = logging.getLogger(__name__)

MIN_GRADE = 0.0
MAX_GRADE = 10.0

# Scale of the stored grade column; finer grades would be rounded on write
GRADE_DECIMAL_PLACES = 2


class XmlValidator:
    """Checks required sections, required fields and grade bounds."""

    def validate(self, xml: bytes | str) -> ValidationResult:
        """Validate a raw import document.

        Args:
            xml: Raw XML bytes or text.

        Returns:
            ValidationResult listing every violation found.
        """
        try:
            root = load_root(xml)
        except XmlParseError as e:
            return ValidationResult(valid=False, errors=[str(e)])

        if root.tag != ROOT_TAG:
            return ValidationResult(
                valid=False,
                errors=[f'Root element "{ROOT_TAG}" not found'],
            )

        errors: list[str] = []
        for section in SECTIONS:
            section_tag, item_tag, required = section
            items = section_items(root, section)
            if items is None:
                errors.append(f'Section "{section_tag}" not found or empty')
                continue

            for index, item in enumerate(items, start=1):
                label = f"{item_tag} {index}"
                for tag in required:
                    value = child_text(item, tag)
                    if value is None:
                        errors.append(f"{label}: {tag} is required")
                    elif section is COURSE_SECTION and tag == "CargaHoraria":
                        if parse_whole_number(value) is None:
                            errors.append(
                                f"{label}: CargaHoraria must be a non-negative whole number"
                            )
                    elif section is GRADE_SECTION and tag == "Valor":
                        if not is_valid_grade(parse_number(value)):
                            errors.append(
                                f"{label}: Valor must be between {MIN_GRADE:g} and {MAX_GRADE:g}"
                            )
                        elif not has_grade_precision(value):
                            errors.append(
                                f"{label}: Valor must have at most {GRADE_DECIMAL_PLACES} decimal places"
                            )

        if errors:
            logger.debug("Structural validation failed with %d error(s)", len(errors))

        return ValidationResult(valid=not errors, errors=errors)


def is_valid_grade(value: float | None) -> bool:
    """Check a parsed grade against the inclusive 0-10 range."""
    return value is not None and MIN_GRADE <= value <= MAX_GRADE


def has_grade_precision(raw: str | None) -> bool:
    """Check a grade fits the stored scale without rounding.

    Trailing zeros do not count, so "6.000" is accepted and "5.996" is not.
    """
    if raw is None:
        return False
    try:
        exponent = Decimal(raw.strip()).normalize().as_tuple().exponent
    except InvalidOperation:
        return False
    return isinstance(exponent, int) and exponent >= -GRADE_DECIMAL_PLACES
