# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Import service for academic XML documents.

This module provides the ImportService class for:
- Validating, parsing and persisting an uploaded XML document
- Writing one audit row per import attempt
- Listing past imports and retrieving the original upload

An import runs through these stages:

    received -> structurally valid -> business valid -> persisted -> logged

Courses, classes, students, enrollments and the success audit row are
written in one transaction. Any failure rolls that transaction back and a
failure audit row is written in a separate transaction before the error is
re-raised, so every attempt leaves exactly one audit row behind.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config.settings import ImportSettings
from src.domains.importing.errors import (
    ImportNotFoundError,
    ImportPersistenceError,
    ImportStorageError,
    OriginalFileNotFoundError,
    ReferentialIntegrityError,
    XmlValidationError,
)
from src.domains.importing.parser import (
    ClassRecord,
    CourseRecord,
    GradeRecord,
    ImportDocument,
    StudentRecord,
    XmlParseError,
    parse_document,
)
from src.domains.importing.rules import validate_business_rules
from src.domains.importing.validation import XmlValidator
from src.domains.metrics.service import MetricsService
from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import (
    IMPORT_STATUS_FAILURE,
    IMPORT_STATUS_SUCCESS,
    Class,
    Course,
    Enrollment,
    ImportLog,
    Student,
)
from src.infrastructure.database.upsert import upsert
from src.infrastructure.storage import (
    ArtifactNotFoundError,
    ContentStore,
    StorageError,
    content_hash,
)
from src.models.importing import ImportLogResponse, ImportResult, OriginalFile
from src.utils.datetime import elapsed_ms
from src.utils.logging import log_context

logger = logging.getLogger(__name__)


def original_artifact_name(file_hash: str) -> str:
    """Content store name of an original upload."""
    return f"{file_hash}.xml"


class ImportService:
    """Service for importing academic XML documents.

    Attributes:
        sessionmaker: Factory for database sessions. The pipeline needs
            independent sessions for the data transaction and the failure
            audit row.
        store: Content store for original uploads.
        settings: Import pipeline settings.
        validator: Structural validator.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        store: ContentStore,
        settings: ImportSettings | None = None,
        validator: XmlValidator | None = None,
    ) -> None:
        """Initialize import service.

        Args:
            sessionmaker: Async sessionmaker bound to the gradebook database.
            store: Content store for original uploads.
            settings: Import settings. Defaults are used when omitted.
            validator: Structural validator. A new one is used when omitted.
        """
        self.sessionmaker = sessionmaker
        self.store = store
        self.settings = settings or ImportSettings()
        self.validator = validator or XmlValidator()

    async def import_xml(
        self,
        content: bytes,
        file_name: str,
        user_id: str | None = None,
    ) -> ImportResult:
        """Import an uploaded XML document.

        Args:
            content: Raw bytes of the upload.
            file_name: Display name of the upload.
            user_id: Optional uploader identity.

        Returns:
            Counts of the imported entities and the audit row id.

        Raises:
            XmlValidationError: If the document is malformed or structurally invalid.
            BusinessRuleError: If a grade is outside 0-10.
            ReferentialIntegrityError: If a class, student or grade
                references an entity missing from the document.
            ImportStorageError: If the original upload cannot be stored.
            ImportPersistenceError: If the database transaction fails.
        """
        started = time.perf_counter()
        file_hash = content_hash(content, self.settings.hash_algorithm)

        logger.info(
            "Import started: file=%s, hash=%s, bytes=%d, by=%s",
            file_name,
            file_hash,
            len(content),
            user_id,
        )

        with log_context(file_hash=file_hash):
            try:
                document = self._validate(content)
                await self._store_original(file_hash, content)
                result = await self._persist(document, file_name, file_hash, user_id, started)
            except Exception as e:
                await self._log_failure(
                    file_name=file_name,
                    file_hash=file_hash,
                    user_id=user_id,
                    message=str(e) or e.__class__.__name__,
                    started=started,
                )
                raise

            await self._refresh_metrics()

        logger.info(
            "Import finished: file=%s, log=%d, courses=%d, classes=%d, students=%d, enrollments=%d",
            file_name,
            result.import_log_id,
            result.courses_imported,
            result.classes_imported,
            result.students_imported,
            result.enrollments_imported,
        )

        return result

    async def list_imports(self, user_id: str | None = None) -> list[ImportLogResponse]:
        """List import attempts, newest first.

        Args:
            user_id: Optional uploader filter.

        Returns:
            Audit rows.
        """
        query = select(ImportLog).order_by(ImportLog.created_at.desc(), ImportLog.id.desc())
        if user_id:
            query = query.where(ImportLog.user_id == user_id)

        async with self.sessionmaker() as session:
            result = await session.execute(query)
            logs = result.scalars().all()

        return [ImportLogResponse.model_validate(log) for log in logs]

    async def get_import(self, import_id: int) -> ImportLogResponse:
        """Get one import attempt.

        Args:
            import_id: Audit row id.

        Returns:
            The audit row.

        Raises:
            ImportNotFoundError: If no such import exists.
        """
        async with self.sessionmaker() as session:
            log = await session.get(ImportLog, import_id)

        if log is None:
            raise ImportNotFoundError(f"Import {import_id} not found")

        return ImportLogResponse.model_validate(log)

    async def get_original_file(self, import_id: int) -> OriginalFile:
        """Retrieve the bytes originally uploaded for an import.

        Args:
            import_id: Audit row id.

        Returns:
            Original bytes and display file name.

        Raises:
            ImportNotFoundError: If the import does not exist or has no hash.
            OriginalFileNotFoundError: If the stored upload is missing.
        """
        log = await self.get_import(import_id)
        if not log.file_hash:
            raise ImportNotFoundError(f"Import {import_id} not found")

        try:
            content = await self.store.get(original_artifact_name(log.file_hash))
        except ArtifactNotFoundError as e:
            raise OriginalFileNotFoundError(
                f"Original file for import {import_id} not found"
            ) from e
        except StorageError as e:
            raise ImportStorageError(f"Failed to read original file for import {import_id}") from e

        return OriginalFile(content=content, file_name=log.file_name)

    def _validate(self, content: bytes) -> ImportDocument:
        """Run size checks, structural validation, mapping and business rules."""
        if not content:
            raise XmlValidationError(["Uploaded file is empty"])

        if len(content) > self.settings.max_file_size:
            raise XmlValidationError(
                [f"File exceeds the maximum size of {self.settings.max_file_size} bytes"]
            )

        validation = self.validator.validate(content)
        if not validation.valid:
            raise XmlValidationError(validation.errors)

        try:
            document = parse_document(content)
        except XmlParseError as e:
            raise XmlValidationError([str(e)]) from e

        validate_business_rules(document)
        return document

    async def _store_original(self, file_hash: str, content: bytes) -> None:
        """Keep the raw upload, addressed by its content hash."""
        try:
            await self.store.put(original_artifact_name(file_hash), content)
        except StorageError as e:
            raise ImportStorageError("Failed to store the original file") from e

    async def _persist(
        self,
        document: ImportDocument,
        file_name: str,
        file_hash: str,
        user_id: str | None,
        started: float,
    ) -> ImportResult:
        """Write every entity and the success audit row in one transaction."""
        async with self.sessionmaker() as session:
            try:
                async with session.begin():
                    course_ids = await self._import_courses(session, document.courses)
                    class_ids = await self._import_classes(session, document.classes, course_ids)
                    student_ids = await self._import_students(session, document.students)
                    enrollments = await self._import_enrollments(
                        session,
                        document.grades,
                        student_ids,
                        class_ids,
                    )

                    import_log = ImportLog(
                        user_id=user_id,
                        file_name=file_name,
                        file_hash=file_hash,
                        records_imported=len(document.students),
                        status=IMPORT_STATUS_SUCCESS,
                        processing_time=elapsed_ms(started),
                    )
                    session.add(import_log)
                    await session.flush()
            except (SQLAlchemyError, DatabaseError) as e:
                logger.exception("Import transaction failed: file=%s, hash=%s", file_name, file_hash)
                raise ImportPersistenceError("Failed to save imported data") from e

        return ImportResult(
            import_log_id=import_log.id,
            students_imported=len(document.students),
            courses_imported=len(document.courses),
            classes_imported=len(document.classes),
            enrollments_imported=enrollments,
        )

    async def _refresh_metrics(self) -> None:
        """Run the post-commit metrics hook.

        The import is already committed and audited here, so a failing hook
        propagates without writing a second audit row.
        """
        async with self.sessionmaker() as session:
            await MetricsService(session).refresh()

    async def _import_courses(
        self,
        session: AsyncSession,
        courses: list[CourseRecord],
    ) -> dict[str, int]:
        """Upsert courses by code.

        Returns:
            Map of course code to surrogate id.
        """
        course_ids: dict[str, int] = {}
        for course in courses:
            course_ids[course.code] = await upsert(
                session,
                Course,
                {"code": course.code, "name": course.name, "workload": course.workload},
                conflict_columns=["code"],
                update_columns=["name", "workload"],
            )
        return course_ids

    async def _import_classes(
        self,
        session: AsyncSession,
        classes: list[ClassRecord],
        course_ids: dict[str, int],
    ) -> dict[str, int]:
        """Upsert classes by class id.

        Returns:
            Map of class id to surrogate id.

        Raises:
            ReferentialIntegrityError: If a class references a course that
                is not part of the document.
        """
        class_ids: dict[str, int] = {}
        for class_ in classes:
            course_id = course_ids.get(class_.course_code)
            if course_id is None:
                raise ReferentialIntegrityError(
                    "course",
                    class_.course_code,
                    f"Course not found: {class_.course_code} for class {class_.class_id}",
                )

            class_ids[class_.class_id] = await upsert(
                session,
                Class,
                {
                    "class_id": class_.class_id,
                    "course_id": course_id,
                    "semester": class_.semester,
                },
                conflict_columns=["class_id"],
                update_columns=["course_id", "semester"],
            )
        return class_ids

    async def _import_students(
        self,
        session: AsyncSession,
        students: list[StudentRecord],
    ) -> dict[str, int]:
        """Upsert students by RA.

        Returns:
            Map of RA to surrogate id.
        """
        student_ids: dict[str, int] = {}
        for student in students:
            student_ids[student.ra] = await upsert(
                session,
                Student,
                {"ra": student.ra, "name": student.name},
                conflict_columns=["ra"],
                update_columns=["name"],
            )
        return student_ids

    async def _import_enrollments(
        self,
        session: AsyncSession,
        grades: list[GradeRecord],
        student_ids: dict[str, int],
        class_ids: dict[str, int],
    ) -> int:
        """Upsert enrollments by (student, class), overwriting the grade.

        Returns:
            Number of grades written.

        Raises:
            ReferentialIntegrityError: If a grade references an unknown
                student RA or class id.
        """
        for grade in grades:
            student_id = student_ids.get(grade.ra)
            if student_id is None:
                raise ReferentialIntegrityError(
                    "student",
                    grade.ra,
                    f"Student not found: {grade.ra}",
                )

            class_id = class_ids.get(grade.class_id)
            if class_id is None:
                raise ReferentialIntegrityError(
                    "class",
                    grade.class_id,
                    f"Class not found: {grade.class_id}",
                )

            await upsert(
                session,
                Enrollment,
                {"student_id": student_id, "class_id": class_id, "grade": Decimal(str(grade.value))},
                conflict_columns=["student_id", "class_id"],
                update_columns=["grade"],
            )
        return len(grades)

    async def _log_failure(
        self,
        file_name: str,
        file_hash: str,
        user_id: str | None,
        message: str,
        started: float,
    ) -> None:
        """Write the failure audit row outside the rolled back transaction."""
        logger.warning("Import failed: file=%s, hash=%s, error=%s", file_name, file_hash, message)

        try:
            async with self.sessionmaker() as session:
                async with session.begin():
                    session.add(
                        ImportLog(
                            user_id=user_id,
                            file_name=file_name,
                            file_hash=file_hash,
                            records_imported=0,
                            status=IMPORT_STATUS_FAILURE,
                            error_message=message,
                            processing_time=elapsed_ms(started),
                        )
                    )
        except SQLAlchemyError:
            logger.exception("Failed to write failure audit row: file=%s, hash=%s", file_name, file_hash)
