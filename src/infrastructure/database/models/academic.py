# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course, class section and enrollment models.

The one-active-section-per-course invariant is backed by a partial unique
index on enrollments(student_id, course_id) restricted to active rows.
enrollments.course_id is copied from the section at enrollment time so the
index can be declared on a single table.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utc_now

ENROLLMENT_ACTIVE = "active"
ENROLLMENT_WITHDRAWN = "withdrawn"


class Course(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A named course offering."""

    __tablename__ = "courses"

    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    sections: Mapped[list[ClassSection]] = relationship(back_populates="course")


class ClassSection(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One instructor-led teaching instance of a course.

    A NULL capacity means the section is unbounded.
    """

    __tablename__ = "class_sections"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    instructor_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True, default=40)

    course: Mapped[Course] = relationship(back_populates="sections")
    enrollments: Mapped[list[Enrollment]] = relationship(back_populates="class_section")


class Enrollment(UUIDPrimaryKeyMixin, Base):
    """A student's membership in one class section."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("class_section_id", "student_id", name="uq_enrollments_section_student"),
        Index(
            "uq_enrollments_active_student_course",
            "student_id",
            "course_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    class_section_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("class_sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ENROLLMENT_ACTIVE)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    withdrawn_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    class_section: Mapped[ClassSection] = relationship(back_populates="enrollments")

    @property
    def is_active(self) -> bool:
        """Check if the enrollment currently holds a seat."""
        return self.status == ENROLLMENT_ACTIVE
