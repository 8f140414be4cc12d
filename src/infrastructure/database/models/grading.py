# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment, grouping and grade models.

Uniqueness that the grading pipeline relies on:
- grading_components (assignment_id, name): one record per declared component
- grades (component_id, student_id): one row per student per component
- group_members (assignment_id, student_id): one group per student per assignment
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utc_now

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Assignment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A gradable task scoped to one class section.

    ``components`` holds the declared grading components as entered by the
    instructor: an ordered list of objects with a name, a weight and a
    description. Older rows use the legacy keys ``nama``, ``bobot`` and
    ``deskripsi``; readers normalize through
    src.domains.grading.components.parse_components.
    """

    __tablename__ = "assignments"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_section_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("class_sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    instructor_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    components: Mapped[Any] = mapped_column(JSONType, nullable=True)
    grades_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    grading_components: Mapped[list[GradingComponent]] = relationship(back_populates="assignment")
    groups: Mapped[list[Group]] = relationship(back_populates="assignment")


class GradingComponent(UUIDPrimaryKeyMixin, Base):
    """Persisted instantiation of one declared component of an assignment."""

    __tablename__ = "grading_components"
    __table_args__ = (
        UniqueConstraint("assignment_id", "name", name="uq_grading_components_assignment_name"),
    )

    assignment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    weight: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    assignment: Mapped[Assignment] = relationship(back_populates="grading_components")


class Group(UUIDPrimaryKeyMixin, Base):
    """A set of students jointly graded on one assignment."""

    __tablename__ = "groups"

    assignment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    assignment: Mapped[Assignment] = relationship(back_populates="groups")
    members: Mapped[list[GroupMember]] = relationship(back_populates="group")


class GroupMember(UUIDPrimaryKeyMixin, Base):
    """Membership of one student in one group."""

    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "student_id", name="uq_group_members_group_student"),
        UniqueConstraint("assignment_id", "student_id", name="uq_group_members_assignment_student"),
    )

    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assignment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    group: Mapped[Group] = relationship(back_populates="members")


class Grade(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One student's score and feedback on one grading component.

    A NULL score means the component is not graded yet.
    """

    __tablename__ = "grades"
    __table_args__ = (
        UniqueConstraint("component_id", "student_id", name="uq_grades_component_student"),
    )

    component_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("grading_components.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    score: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    feedback: Mapped[str] = mapped_column(Text, nullable=False, default="")
    graded_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
