# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Renderers for the consolidated results export.

Each renderer turns already computed report rows into the bytes of one
file format. They do no I/O and no database access.

Element and column names follow the Portuguese vocabulary of the import
file (Aluno, Disciplina, Nota, ...), so an export reads like its input.
"""

import csv
import io
import json
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from src.models.reporting import CourseReportRow, DashboardMetrics, StudentWithMetrics
from src.utils.datetime import format_iso

CSV_HEADER = [
    "RA",
    "Nome",
    "Código Disciplina",
    "Nome Disciplina",
    "Nota",
    "Status Disciplina",
    "Média Geral",
    "Situação Geral",
]

# Students rendered in the PDF, the rest is left to the tabular formats
PDF_STUDENT_LIMIT = 50

CONTENT_TYPES = {
    "xml": "application/xml",
    "csv": "text/csv",
    "json": "application/json",
    "pdf": "application/pdf",
}


def format_number(value: float) -> str:
    """Shortest plain rendering of a grade or GPA (7.0 -> "7", 7.43 -> "7.43")."""
    return format(value, "g")


def render_xml(students: Sequence[StudentWithMetrics]) -> bytes:
    """Render students and their disciplines as a Resultados document.

    Args:
        students: Students with metrics.

    Returns:
        UTF-8 encoded XML with declaration.
    """
    root = ET.Element("Resultados")
    alunos = ET.SubElement(root, "Alunos")

    for student in students:
        aluno = ET.SubElement(alunos, "Aluno", {"RA": student.ra, "Nome": student.name})
        disciplinas = ET.SubElement(aluno, "Disciplinas")
        for discipline in student.disciplines:
            disciplina = ET.SubElement(
                disciplinas,
                "Disciplina",
                {
                    "Codigo": discipline.course_code,
                    "Nome": discipline.course_name,
                    "CargaHoraria": str(discipline.workload),
                    "Semestre": discipline.semester,
                },
            )
            ET.SubElement(disciplina, "Nota").text = format_number(discipline.grade)
            ET.SubElement(disciplina, "Status").text = discipline.status
        ET.SubElement(aluno, "MediaGeral").text = format_number(student.gpa)
        ET.SubElement(aluno, "SituacaoGeral").text = student.overall_status

    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def render_csv(students: Sequence[StudentWithMetrics]) -> bytes:
    """Render one row per discipline; students without grades get one blank row.

    Args:
        students: Students with metrics.

    Returns:
        UTF-8 encoded CSV with header.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for student in students:
        gpa = format_number(student.gpa)
        if not student.disciplines:
            writer.writerow([student.ra, student.name, "", "", "", "", gpa, student.overall_status])
            continue
        for discipline in student.disciplines:
            writer.writerow(
                [
                    student.ra,
                    student.name,
                    discipline.course_code,
                    discipline.course_name,
                    format_number(discipline.grade),
                    discipline.status,
                    gpa,
                    student.overall_status,
                ]
            )

    return buffer.getvalue().encode("utf-8")


def render_json(students: Sequence[StudentWithMetrics], generated_at: datetime) -> bytes:
    """Render students as {generatedAt, alunos}.

    Args:
        students: Students with metrics.
        generated_at: Timestamp written to the document.

    Returns:
        UTF-8 encoded, indented JSON.
    """
    document = {
        "generatedAt": format_iso(generated_at),
        "alunos": [
            {
                "RA": student.ra,
                "Nome": student.name,
                "Disciplinas": [
                    {
                        "Codigo": discipline.course_code,
                        "Nome": discipline.course_name,
                        "CargaHoraria": discipline.workload,
                        "Semestre": discipline.semester,
                        "Nota": discipline.grade,
                        "Status": discipline.status,
                    }
                    for discipline in student.disciplines
                ],
                "MediaGeral": student.gpa,
                "SituacaoGeral": student.overall_status,
            }
            for student in students
        ],
    }
    return json.dumps(document, ensure_ascii=False, indent=2).encode("utf-8")


def render_pdf(
    dashboard: DashboardMetrics,
    students: Sequence[StudentWithMetrics],
    courses: Sequence[CourseReportRow],
    generated_at: datetime,
) -> bytes:
    """Render a printable report: overview, per-student results, per-course statistics.

    Only the first PDF_STUDENT_LIMIT students are included.

    Args:
        dashboard: System-wide metrics.
        students: Students with metrics.
        courses: Course statistics.
        generated_at: Timestamp printed on the cover.

    Returns:
        PDF bytes.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title="Relatório de Notas Acadêmicas",
    )

    styles = getSampleStyleSheet()
    title = styles["Title"]
    heading = styles["Heading1"]
    subheading = styles["Heading3"]
    body = styles["Normal"]

    def line(text: str):
        return Paragraph(escape(text), body)

    story = [
        Paragraph("Relatório de Notas Acadêmicas", title),
        Paragraph(escape(f"Gerado em: {generated_at:%d/%m/%Y %H:%M:%S}"), body),
        PageBreak(),
        Paragraph("Visão Geral", heading),
        line(f"Total de Alunos: {dashboard.total_students}"),
        line(f"Média Geral (GPA): {format_number(dashboard.overall_gpa)}"),
        line(f"Taxa de Aprovação: {format_number(dashboard.overall_approval_rate)}%"),
        line(f"Total de Disciplinas: {dashboard.total_courses}"),
        line(f"Total de Turmas: {dashboard.total_classes}"),
        PageBreak(),
        Paragraph("Resultados por Aluno", heading),
    ]

    for student in students[:PDF_STUDENT_LIMIT]:
        story.append(Paragraph(escape(f"{student.name} (RA: {student.ra})"), subheading))
        story.append(line(f"Média Geral: {format_number(student.gpa)}"))
        story.append(line(f"Situação: {student.overall_status}"))
        if student.disciplines:
            story.append(line("Disciplinas:"))
            for discipline in student.disciplines:
                story.append(
                    line(
                        f"  - {discipline.course_name} ({discipline.course_code}): "
                        f"{format_number(discipline.grade)} - {discipline.status}"
                    )
                )
        story.append(Spacer(1, 4 * mm))

    story.append(PageBreak())
    story.append(Paragraph("Estatísticas por Disciplina", heading))
    for course in courses:
        story.append(Paragraph(escape(f"{course.name} ({course.code})"), subheading))
        story.append(line(f"Média: {format_number(course.average)}"))
        story.append(line(f"Desvio Padrão: {format_number(course.standard_deviation)}"))
        story.append(line(f"Taxa de Aprovação: {format_number(course.approval_rate)}%"))
        story.append(line(f"Total de Alunos: {course.total_students}"))
        story.append(Spacer(1, 4 * mm))

    doc.build(story)
    return buffer.getvalue()
