# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Importing domain package.

This package provides academic XML ingestion:
- Structural validation of the fixed import layout
- Mapping of the XML tree to typed records
- Business-rule checks on the parsed records
- The transactional import pipeline with its audit trail
"""

from src.domains.importing.errors import (
    BusinessRuleError,
    ImportNotFoundError,
    ImportPersistenceError,
    ImportServiceError,
    ImportStorageError,
    InvalidImportError,
    OriginalFileNotFoundError,
    ReferentialIntegrityError,
    XmlValidationError,
)
from src.domains.importing.parser import ImportDocument, parse_document
from src.domains.importing.rules import validate_business_rules
from src.domains.importing.service import ImportService
from src.domains.importing.validation import XmlValidator

__all__ = [
    "ImportService",
    "XmlValidator",
    "ImportDocument",
    "parse_document",
    "validate_business_rules",
    "ImportServiceError",
    "InvalidImportError",
    "XmlValidationError",
    "BusinessRuleError",
    "ReferentialIntegrityError",
    "ImportPersistenceError",
    "ImportStorageError",
    "ImportNotFoundError",
    "OriginalFileNotFoundError",
]
