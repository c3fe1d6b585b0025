# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for export renderers."""

import csv
import io
import json
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import pytest

from src.domains.reporting.exporters import (
    CSV_HEADER,
    format_number,
    render_csv,
    render_json,
    render_pdf,
    render_xml,
)
from src.models.metrics import DisciplineResult
from src.models.reporting import CourseReportRow, DashboardMetrics, StudentWithMetrics

GENERATED_AT = datetime(2025, 1, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def students():
    """Create one graded and one ungraded student."""
    return [
        StudentWithMetrics(
            id=1,
            ra="2023001",
            name="Ana Souza",
            gpa=7.43,
            overall_status="Approved",
            disciplines=[
                DisciplineResult(
                    course_code="MAT101",
                    course_name="Cálculo I",
                    grade=8.0,
                    status="Approved",
                    semester="2023-1",
                    workload=60,
                ),
                DisciplineResult(
                    course_code="PROG101",
                    course_name="Programação, Lógica",
                    grade=7.0,
                    status="Approved",
                    semester="2023-1",
                    workload=80,
                ),
            ],
        ),
        StudentWithMetrics(id=2, ra="2023002", name="Bruno Lima"),
    ]


class TestFormatNumber:
    """Tests for number rendering."""

    @pytest.mark.parametrize("value,expected", [(7.0, "7"), (7.43, "7.43"), (10.0, "10"), (0.0, "0"), (66.67, "66.67")])
    def test_format(self, value, expected):
        """Test whole numbers drop the fractional part."""
        assert format_number(value) == expected


class TestRenderXml:
    """Tests for XML export."""

    def test_structure(self, students):
        """Test Resultados/Alunos/Aluno with disciplines and summary."""
        root = ET.fromstring(render_xml(students))

        assert root.tag == "Resultados"
        alunos = root.findall("./Alunos/Aluno")
        assert [a.get("RA") for a in alunos] == ["2023001", "2023002"]
        assert alunos[0].get("Nome") == "Ana Souza"

        disciplinas = alunos[0].findall("./Disciplinas/Disciplina")
        assert disciplinas[0].get("Codigo") == "MAT101"
        assert disciplinas[0].get("CargaHoraria") == "60"
        assert disciplinas[0].findtext("Nota") == "8"
        assert disciplinas[0].findtext("Status") == "Approved"
        assert alunos[0].findtext("MediaGeral") == "7.43"
        assert alunos[0].findtext("SituacaoGeral") == "Approved"

    def test_student_without_grades(self, students):
        """Test an ungraded student has no disciplines and N/A status."""
        root = ET.fromstring(render_xml(students))
        aluno = root.findall("./Alunos/Aluno")[1]

        assert aluno.findall("./Disciplinas/Disciplina") == []
        assert aluno.findtext("MediaGeral") == "0"
        assert aluno.findtext("SituacaoGeral") == "N/A"

    def test_declaration(self, students):
        """Test the output starts with an XML declaration."""
        assert render_xml(students).startswith(b"<?xml")


class TestRenderCsv:
    """Tests for CSV export."""

    def test_rows(self, students):
        """Test one row per discipline and one blank row per ungraded student."""
        rows = list(csv.reader(io.StringIO(render_csv(students).decode("utf-8"))))

        assert rows[0] == CSV_HEADER
        assert rows[1] == ["2023001", "Ana Souza", "MAT101", "Cálculo I", "8", "Approved", "7.43", "Approved"]
        assert rows[2][3] == "Programação, Lógica"
        assert rows[3] == ["2023002", "Bruno Lima", "", "", "", "", "0", "N/A"]
        assert len(rows) == 4

    def test_header_line(self, students):
        """Test the exact header line."""
        first_line = render_csv(students).decode("utf-8").split("\n")[0]

        assert first_line == "RA,Nome,Código Disciplina,Nome Disciplina,Nota,Status Disciplina,Média Geral,Situação Geral"


class TestRenderJson:
    """Tests for JSON export."""

    def test_document(self, students):
        """Test generatedAt and alunos with nested disciplines."""
        document = json.loads(render_json(students, GENERATED_AT))

        assert document["generatedAt"] == "2025-01-15T12:30:00+00:00"
        assert len(document["alunos"]) == 2
        ana = document["alunos"][0]
        assert ana["RA"] == "2023001"
        assert ana["MediaGeral"] == 7.43
        assert ana["Disciplinas"][1] == {
            "Codigo": "PROG101",
            "Nome": "Programação, Lógica",
            "CargaHoraria": 80,
            "Semestre": "2023-1",
            "Nota": 7.0,
            "Status": "Approved",
        }
        assert document["alunos"][1]["SituacaoGeral"] == "N/A"


class TestRenderPdf:
    """Tests for PDF export."""

    def test_renders_pdf(self, students):
        """Test a PDF document is produced."""
        dashboard = DashboardMetrics(total_students=2, overall_gpa=7.43, overall_approval_rate=100.0)
        courses = [
            CourseReportRow(id=1, code="MAT101", name="Cálculo I", workload=60, average=8.0, total_students=1)
        ]

        content = render_pdf(dashboard, students, courses, GENERATED_AT)

        assert content.startswith(b"%PDF")
        assert len(content) > 1000

    def test_escapes_markup_in_names(self):
        """Test names with markup characters do not break rendering."""
        student = StudentWithMetrics(id=1, ra="1", name="Ana <Souza> & Cia")

        content = render_pdf(DashboardMetrics(), [student], [], GENERATED_AT)

        assert content.startswith(b"%PDF")
