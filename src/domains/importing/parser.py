# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""XML to record mapping.

The import document layout is fixed:

    <Importacao>
      <Cursos><Curso><Codigo/><Nome/><CargaHoraria/></Curso>...</Cursos>
      <Turmas><Turma><Id/><CursoCodigo/><Semestre/></Turma>...</Turmas>
      <Alunos><Aluno><RA/><Nome/></Aluno>...</Alunos>
      <Notas><Nota><RA/><TurmaId/><Valor/></Nota>...</Notas>
    </Importacao>

All element lookups and text unwrapping happen here; the rest of the
pipeline works with the typed records below.
"""

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

ROOT_TAG = "Importacao"

# (section tag, item tag, required fields)
COURSE_SECTION = ("Cursos", "Curso", ("Codigo", "Nome", "CargaHoraria"))
CLASS_SECTION = ("Turmas", "Turma", ("Id", "CursoCodigo", "Semestre"))
STUDENT_SECTION = ("Alunos", "Aluno", ("RA", "Nome"))
GRADE_SECTION = ("Notas", "Nota", ("RA", "TurmaId", "Valor"))

SECTIONS = (COURSE_SECTION, CLASS_SECTION, STUDENT_SECTION, GRADE_SECTION)


class XmlParseError(ValueError):
    """Raised when the XML cannot be mapped to records."""

    pass


@dataclass(frozen=True)
class CourseRecord:
    code: str
    name: str
    workload: int


@dataclass(frozen=True)
class ClassRecord:
    class_id: str
    course_code: str
    semester: str


@dataclass(frozen=True)
class StudentRecord:
    ra: str
    name: str


@dataclass(frozen=True)
class GradeRecord:
    """A grade as written in the document.

    The raw text is kept so business rules can report the original value.
    """

    ra: str
    class_id: str
    raw_value: str

    @property
    def value(self) -> float | None:
        """Numeric grade, or None when the text is not a finite number."""
        return parse_number(self.raw_value)


@dataclass(frozen=True)
class ImportDocument:
    """Typed content of one import file."""

    courses: list[CourseRecord] = field(default_factory=list)
    classes: list[ClassRecord] = field(default_factory=list)
    students: list[StudentRecord] = field(default_factory=list)
    grades: list[GradeRecord] = field(default_factory=list)


def parse_number(raw: str | None) -> float | None:
    """Parse a decimal number, rejecting NaN and infinities.

    Args:
        raw: Text to parse.

    Returns:
        The float value, or None if the text is not a finite number.
    """
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_whole_number(raw: str | None) -> int | None:
    """Parse a non-negative integer.

    Args:
        raw: Text to parse.

    Returns:
        The integer, or None if the text is not a non-negative integer.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text.isdigit():
        return None
    return int(text)


def child_text(element: ET.Element, tag: str) -> str | None:
    """Stripped text of the first child with the given tag.

    Args:
        element: Parent element.
        tag: Child tag name.

    Returns:
        The text, or None when the child is missing or blank.
    """
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def section_items(root: ET.Element, section: tuple[str, str, tuple[str, ...]]) -> list[ET.Element] | None:
    """Items of a section.

    Args:
        root: Document root.
        section: Section definition from SECTIONS.

    Returns:
        The item elements, or None when the section is missing or empty.
    """
    section_tag, item_tag, _ = section
    container = root.find(section_tag)
    if container is None:
        return None
    items = container.findall(item_tag)
    return items or None


def load_root(xml: bytes | str) -> ET.Element:
    """Parse XML text into its root element.

    Args:
        xml: Raw document.

    Returns:
        Root element.

    Raises:
        XmlParseError: If the document is not well-formed.
    """
    try:
        return ET.fromstring(xml)
    except ET.ParseError as e:
        raise XmlParseError(f"Failed to parse XML: {e}") from e


def _require(element: ET.Element, tag: str, label: str) -> str:
    value = child_text(element, tag)
    if value is None:
        raise XmlParseError(f"{label}: {tag} is required")
    return value


def parse_document(xml: bytes | str) -> ImportDocument:
    """Map a structurally valid document to records.

    Args:
        xml: Raw document, already accepted by the structural validator.

    Returns:
        ImportDocument with one record per item, in document order.

    Raises:
        XmlParseError: If the document does not have the expected shape.
    """
    root = load_root(xml)
    if root.tag != ROOT_TAG:
        raise XmlParseError(f'Root element "{ROOT_TAG}" not found')

    courses = []
    for index, item in enumerate(section_items(root, COURSE_SECTION) or [], start=1):
        label = f"Curso {index}"
        workload = parse_whole_number(_require(item, "CargaHoraria", label))
        if workload is None:
            raise XmlParseError(f"{label}: CargaHoraria must be a non-negative whole number")
        courses.append(
            CourseRecord(
                code=_require(item, "Codigo", label),
                name=_require(item, "Nome", label),
                workload=workload,
            )
        )

    classes = [
        ClassRecord(
            class_id=_require(item, "Id", f"Turma {index}"),
            course_code=_require(item, "CursoCodigo", f"Turma {index}"),
            semester=_require(item, "Semestre", f"Turma {index}"),
        )
        for index, item in enumerate(section_items(root, CLASS_SECTION) or [], start=1)
    ]

    students = [
        StudentRecord(
            ra=_require(item, "RA", f"Aluno {index}"),
            name=_require(item, "Nome", f"Aluno {index}"),
        )
        for index, item in enumerate(section_items(root, STUDENT_SECTION) or [], start=1)
    ]

    grades = [
        GradeRecord(
            ra=_require(item, "RA", f"Nota {index}"),
            class_id=_require(item, "TurmaId", f"Nota {index}"),
            raw_value=_require(item, "Valor", f"Nota {index}"),
        )
        for index, item in enumerate(section_items(root, GRADE_SECTION) or [], start=1)
    ]

    return ImportDocument(
        courses=courses,
        classes=classes,
        students=students,
        grades=grades,
    )
