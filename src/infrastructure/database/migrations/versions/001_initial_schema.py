# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial CourseGrade schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15

Creates the academic tables (courses, class sections, enrollments) and the
grading tables (assignments, components, groups, members, grades).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create CourseGrade tables."""
    # ==========================================================================
    # 1. courses table
    # ==========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("credits", sa.Integer, nullable=False, server_default="0"),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("code", name="uq_courses_code"),
    )

    # ==========================================================================
    # 2. class_sections table
    # ==========================================================================
    op.create_table(
        "class_sections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("instructor_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=True),
        sa.Column("capacity", sa.Integer, nullable=True, server_default="40"),
        *_timestamps(),
        sa.CheckConstraint("capacity IS NULL OR capacity >= 0", name="capacity_non_negative"),
    )
    op.create_index("ix_class_sections_course_id", "class_sections", ["course_id"])
    op.create_index("ix_class_sections_instructor_id", "class_sections", ["instructor_id"])

    # ==========================================================================
    # 3. enrollments table
    # ==========================================================================
    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "class_section_id",
            sa.String(36),
            sa.ForeignKey("class_sections.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("withdrawn_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("class_section_id", "student_id", name="uq_enrollments_section_student"),
        sa.CheckConstraint(
            "status IN ('active', 'withdrawn')",
            name="valid_enrollment_status",
        ),
    )
    op.create_index("ix_enrollments_class_section_id", "enrollments", ["class_section_id"])
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    # At most one active section per (student, course)
    op.create_index(
        "uq_enrollments_active_student_course",
        "enrollments",
        ["student_id", "course_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    # ==========================================================================
    # 4. assignments table
    # ==========================================================================
    op.create_table(
        "assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "class_section_id",
            sa.String(36),
            sa.ForeignKey("class_sections.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("instructor_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("components", postgresql.JSONB, nullable=True),
        sa.Column("grades_visible", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])
    op.create_index("ix_assignments_class_section_id", "assignments", ["class_section_id"])
    op.create_index("ix_assignments_instructor_id", "assignments", ["instructor_id"])

    # ==========================================================================
    # 5. grading_components table
    # ==========================================================================
    op.create_table(
        "grading_components",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "assignment_id",
            sa.String(36),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("weight", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("assignment_id", "name", name="uq_grading_components_assignment_name"),
    )
    op.create_index("ix_grading_components_assignment_id", "grading_components", ["assignment_id"])

    # ==========================================================================
    # 6. groups table
    # ==========================================================================
    op.create_table(
        "groups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "assignment_id",
            sa.String(36),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_groups_assignment_id", "groups", ["assignment_id"])

    # ==========================================================================
    # 7. group_members table
    # ==========================================================================
    op.create_table(
        "group_members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "group_id",
            sa.String(36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "assignment_id",
            sa.String(36),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("group_id", "student_id", name="uq_group_members_group_student"),
        sa.UniqueConstraint("assignment_id", "student_id", name="uq_group_members_assignment_student"),
    )
    op.create_index("ix_group_members_group_id", "group_members", ["group_id"])
    op.create_index("ix_group_members_student_id", "group_members", ["student_id"])

    # ==========================================================================
    # 8. grades table
    # ==========================================================================
    op.create_table(
        "grades",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "component_id",
            sa.String(36),
            sa.ForeignKey("grading_components.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column("score", sa.Numeric(5, 2), nullable=True),
        sa.Column("feedback", sa.Text, nullable=False, server_default=""),
        sa.Column("graded_by", sa.String(36), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("component_id", "student_id", name="uq_grades_component_student"),
    )
    op.create_index("ix_grades_component_id", "grades", ["component_id"])
    op.create_index("ix_grades_student_id", "grades", ["student_id"])


def downgrade() -> None:
    """Drop CourseGrade tables."""
    op.drop_table("grades")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("grading_components")
    op.drop_table("assignments")
    op.drop_table("enrollments")
    op.drop_table("class_sections")
    op.drop_table("courses")
