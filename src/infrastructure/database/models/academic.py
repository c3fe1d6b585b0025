# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic enrollment models.

Course, Class and Student are dimension tables identified by their natural
keys (code, class_id, ra). Enrollment is the fact table tying a Student to a
Class with a grade. Surrogate integer ids are internal only.
"""

from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin


class Course(Base, TimestampMixin):
    """A course (discipline) with its workload in hours."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    workload: Mapped[int] = mapped_column(Integer, nullable=False)

    classes: Mapped[list["Class"]] = relationship(back_populates="course")

    def __repr__(self) -> str:
        return f"<Course {self.code}>"


class Class(Base, TimestampMixin):
    """An offering (section) of a course in a given semester."""

    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    course_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    semester: Mapped[str] = mapped_column(String(20), nullable=False)

    course: Mapped[Course] = relationship(back_populates="classes")
    enrollments: Mapped[list["Enrollment"]] = relationship(back_populates="class_")

    def __repr__(self) -> str:
        return f"<Class {self.class_id}>"


class Student(Base, TimestampMixin):
    """A student identified by registration number (RA)."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ra: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    enrollments: Mapped[list["Enrollment"]] = relationship(back_populates="student")

    def __repr__(self) -> str:
        return f"<Student {self.ra}>"


class Enrollment(Base, TimestampMixin):
    """A student's grade in one class. One row per (student, class)."""

    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Two decimal places; the validators reject finer grades
    grade: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)

    student: Mapped[Student] = relationship(back_populates="enrollments")
    class_: Mapped[Class] = relationship(back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint("student_id", "class_id", name="uq_enrollments_student_class"),
        CheckConstraint("grade >= 0 AND grade <= 10", name="ck_enrollments_grade_range"),
    )
