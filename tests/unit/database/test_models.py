# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests model definitions, constraints, and helper methods.
"""

from sqlalchemy import UniqueConstraint

from src.infrastructure.database.models import (
    ENROLLMENT_ACTIVE,
    ENROLLMENT_WITHDRAWN,
    Assignment,
    Base,
    ClassSection,
    Course,
    Enrollment,
    Grade,
    GradingComponent,
    Group,
    GroupMember,
    TimestampMixin,
)
from src.infrastructure.database.models.base import new_id, utc_now


def _unique_constraints(model) -> dict[str, tuple[str, ...]]:
    return {
        constraint.name: tuple(column.name for column in constraint.columns)
        for constraint in model.__table__.constraints
        if isinstance(constraint, UniqueConstraint)
    }


class TestBase:
    """Test base model functionality."""

    def test_base_inherits_declarative_base(self):
        """Verify Base is a declarative base."""
        assert hasattr(Base, "metadata")
        assert hasattr(Base, "registry")

    def test_timestamp_mixin_has_created_at(self):
        """Verify TimestampMixin has created_at field."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")

    def test_new_id_is_unique(self):
        """Verify generated identifiers are distinct UUID strings."""
        first, second = new_id(), new_id()

        assert first != second
        assert len(first) == 36

    def test_utc_now_is_aware(self):
        """Verify timestamps carry a timezone."""
        assert utc_now().tzinfo is not None

    def test_all_tables_registered(self):
        """Verify every model is part of the shared metadata."""
        assert set(Base.metadata.tables) == {
            "courses",
            "class_sections",
            "enrollments",
            "assignments",
            "grading_components",
            "groups",
            "group_members",
            "grades",
        }


class TestAcademicModels:
    """Test course, section and enrollment models."""

    def test_course_code_unique(self):
        """Verify course codes are unique."""
        assert Course.__table__.c.code.unique is True

    def test_section_capacity_nullable(self):
        """Verify a section may be unbounded."""
        assert ClassSection.__table__.c.capacity.nullable is True

    def test_enrollment_section_student_unique(self):
        """Verify one row per student per section."""
        constraints = _unique_constraints(Enrollment)

        assert constraints["uq_enrollments_section_student"] == ("class_section_id", "student_id")

    def test_enrollment_active_course_index(self):
        """Verify the partial unique index backing one active section per course."""
        indexes = {index.name: index for index in Enrollment.__table__.indexes}
        index = indexes["uq_enrollments_active_student_course"]

        assert index.unique is True
        assert [column.name for column in index.columns] == ["student_id", "course_id"]
        assert "status = 'active'" in str(index.dialect_options["postgresql"]["where"])

    def test_enrollment_is_active(self):
        """Test Enrollment.is_active property."""
        active = Enrollment(status=ENROLLMENT_ACTIVE)
        withdrawn = Enrollment(status=ENROLLMENT_WITHDRAWN)

        assert active.is_active is True
        assert withdrawn.is_active is False


class TestGradingModels:
    """Test assignment, group and grade models."""

    def test_component_name_unique_per_assignment(self):
        """Verify one component record per declared name."""
        constraints = _unique_constraints(GradingComponent)

        assert constraints["uq_grading_components_assignment_name"] == ("assignment_id", "name")

    def test_grade_unique_per_component_and_student(self):
        """Verify one grade row per student per component."""
        constraints = _unique_constraints(Grade)

        assert constraints["uq_grades_component_student"] == ("component_id", "student_id")

    def test_group_member_one_group_per_assignment(self):
        """Verify a student belongs to at most one group per assignment."""
        constraints = _unique_constraints(GroupMember)

        assert constraints["uq_group_members_assignment_student"] == ("assignment_id", "student_id")
        assert constraints["uq_group_members_group_student"] == ("group_id", "student_id")

    def test_grade_score_nullable(self):
        """Verify an ungraded component is stored as NULL."""
        assert Grade.__table__.c.score.nullable is True

    def test_assignment_components_json(self):
        """Verify declared components are stored as JSON."""
        assignment = Assignment(
            title="Project",
            components=[{"name": "Proposal", "weight": 30}],
        )

        assert assignment.components[0]["name"] == "Proposal"

    def test_group_tablename(self):
        """Verify group table name."""
        assert Group.__tablename__ == "groups"
