# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Import pipeline exceptions.

Errors caused by the uploaded document set is_user_error so the transport
layer can answer with a client error; everything else is a system fault.
Messages are safe to show to the uploader.
"""


class ImportServiceError(Exception):
    """Base exception for import pipeline errors."""

    is_user_error: bool = False


class InvalidImportError(ImportServiceError):
    """The uploaded document cannot be imported as-is."""

    is_user_error = True


class XmlValidationError(InvalidImportError):
    """Raised when the document fails structural validation.

    Attributes:
        errors: Every structural violation found.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"XML validation failed: {', '.join(self.errors)}")


class BusinessRuleError(InvalidImportError):
    """Raised when parsed data violates a business rule.

    Attributes:
        errors: One message per violation.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ReferentialIntegrityError(InvalidImportError):
    """Raised when a record references an entity absent from the document.

    Attributes:
        entity: Kind of the missing entity (course, student, class).
        key: Natural key that could not be resolved.
    """

    def __init__(self, entity: str, key: str, message: str) -> None:
        self.entity = entity
        self.key = key
        super().__init__(message)


class ImportPersistenceError(ImportServiceError):
    """Raised when the database transaction fails."""

    pass


class ImportStorageError(ImportServiceError):
    """Raised when the original upload cannot be stored or read."""

    pass


class ImportNotFoundError(ImportServiceError):
    """Raised when an import log id does not exist."""

    is_user_error = True


class OriginalFileNotFoundError(ImportServiceError):
    """Raised when the stored original upload is missing."""

    pass
