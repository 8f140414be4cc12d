# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the CourseGrade database."""

from src.infrastructure.database.models.academic import (
    ENROLLMENT_ACTIVE,
    ENROLLMENT_WITHDRAWN,
    ClassSection,
    Course,
    Enrollment,
)
from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.infrastructure.database.models.grading import (
    Assignment,
    Grade,
    GradingComponent,
    Group,
    GroupMember,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Academic
    "Course",
    "ClassSection",
    "Enrollment",
    "ENROLLMENT_ACTIVE",
    "ENROLLMENT_WITHDRAWN",
    # Grading
    "Assignment",
    "GradingComponent",
    "Group",
    "GroupMember",
    "Grade",
]
