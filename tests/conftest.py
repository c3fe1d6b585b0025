# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (sample documents, mock sessions)
- Integration tests (in-memory SQLite database, temporary content store)
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from src.core.config.settings import ImportSettings, Settings, StorageSettings
from src.infrastructure.database.connection import (
    build_engine,
    build_sessionmaker,
    create_schema,
)
from src.infrastructure.storage import ContentStore

# =============================================================================
# Sample Documents
# =============================================================================

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Importacao>
  <Cursos>
    <Curso><Codigo>MAT101</Codigo><Nome>Cálculo I</Nome><CargaHoraria>60</CargaHoraria></Curso>
    <Curso><Codigo>PROG101</Codigo><Nome>Programação I</Nome><CargaHoraria>80</CargaHoraria></Curso>
  </Cursos>
  <Turmas>
    <Turma><Id>T1</Id><CursoCodigo>MAT101</CursoCodigo><Semestre>2023-1</Semestre></Turma>
    <Turma><Id>T2</Id><CursoCodigo>PROG101</CursoCodigo><Semestre>2023-1</Semestre></Turma>
  </Turmas>
  <Alunos>
    <Aluno><RA>2023001</RA><Nome>Ana Souza</Nome></Aluno>
    <Aluno><RA>2023002</RA><Nome>Bruno Lima</Nome></Aluno>
  </Alunos>
  <Notas>
    <Nota><RA>2023001</RA><TurmaId>T1</TurmaId><Valor>8.0</Valor></Nota>
    <Nota><RA>2023001</RA><TurmaId>T2</TurmaId><Valor>7.0</Valor></Nota>
    <Nota><RA>2023002</RA><TurmaId>T1</TurmaId><Valor>5.0</Valor></Nota>
    <Nota><RA>2023002</RA><TurmaId>T2</TurmaId><Valor>9.0</Valor></Nota>
  </Notas>
</Importacao>
"""


def build_xml(
    courses: str = "<Curso><Codigo>MAT101</Codigo><Nome>Cálculo I</Nome><CargaHoraria>60</CargaHoraria></Curso>",
    classes: str = "<Turma><Id>T1</Id><CursoCodigo>MAT101</CursoCodigo><Semestre>2023-1</Semestre></Turma>",
    students: str = "<Aluno><RA>2023001</RA><Nome>Ana Souza</Nome></Aluno>",
    grades: str = "<Nota><RA>2023001</RA><TurmaId>T1</TurmaId><Valor>8.0</Valor></Nota>",
) -> bytes:
    """Build a minimal import document, one section at a time."""
    return (
        "<Importacao>"
        f"<Cursos>{courses}</Cursos>"
        f"<Turmas>{classes}</Turmas>"
        f"<Alunos>{students}</Alunos>"
        f"<Notas>{grades}</Notas>"
        "</Importacao>"
    ).encode("utf-8")


@pytest.fixture
def sample_xml() -> bytes:
    """Provide a valid document with two courses, classes and students."""
    return SAMPLE_XML.encode("utf-8")


@pytest.fixture
def xml_builder():
    """Provide the minimal document builder."""
    return build_xml


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (in-memory SQLite)"
    )


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    return db


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def content_store(tmp_path) -> ContentStore:
    """Provide a content store rooted in a temporary directory."""
    return ContentStore(tmp_path / "uploads")


@pytest.fixture
def storage_settings(tmp_path) -> StorageSettings:
    """Provide storage settings pointing at the temporary directory."""
    return StorageSettings(root=tmp_path / "uploads")


@pytest.fixture
def import_settings() -> ImportSettings:
    """Provide default import settings."""
    return ImportSettings()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def sqlite_settings() -> Settings:
    """Provide settings targeting an in-memory SQLite database."""
    with patch.dict(os.environ, {"DB_URL": "sqlite+aiosqlite:///:memory:"}):
        return Settings()


@pytest_asyncio.fixture
async def db_engine(sqlite_settings: Settings):
    """Create an in-memory database with the full schema."""
    engine = build_engine(sqlite_settings)
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def db_sessionmaker(db_engine):
    """Provide a sessionmaker bound to the in-memory database."""
    return build_sessionmaker(db_engine)


@pytest_asyncio.fixture
async def db_session(db_sessionmaker):
    """Provide a session for direct reads in assertions."""
    async with db_sessionmaker() as session:
        yield session
