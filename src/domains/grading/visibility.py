# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Visibility gate for student-facing grade reads.

A student sees computed grades only when they hold an active enrollment in
the assignment's class section and the instructor has published grades.
Enrollment is checked first: a student outside the class is refused even
when grades are published.
"""

from __future__ import annotations

from typing import Any

from src.domains.grading.exceptions import NotEnrolledError
from src.infrastructure.database.models.grading import Assignment

DEFAULT_HIDDEN_MESSAGE = "Grades have not been published by the instructor yet"


def can_view_grades(assignment: Assignment, enrollment_active: bool) -> bool:
    """Check if a student may see the assignment's computed grades."""
    return bool(enrollment_active) and bool(assignment.grades_visible)


def ensure_enrolled(enrollment_active: bool) -> None:
    """Refuse access to students without an active enrollment.

    Raises:
        NotEnrolledError: If the enrollment is not active.
    """
    if not enrollment_active:
        raise NotEnrolledError()


def format_for_student(
    assignment: Assignment,
    payload: dict[str, Any] | None,
    hidden_message: str = DEFAULT_HIDDEN_MESSAGE,
    enrollment_active: bool = True,
) -> dict[str, Any]:
    """Shape the student response according to can_view_grades.

    When grades are hidden the payload is dropped entirely. When visible,
    the payload is passed through as is, including an average of None
    or 0, and a missing payload stays None.

    Args:
        assignment: The assignment being read.
        payload: Components, grades and average for the student.
        hidden_message: Message shown while grades are unpublished.
        enrollment_active: Whether the reader holds an active enrollment.

    Returns:
        ``{"visible": False, "message": ...}`` or
        ``{"visible": True, "data": ...}``.
    """
    if not can_view_grades(assignment, enrollment_active):
        return {"visible": False, "message": hidden_message}
    return {"visible": True, "data": payload}
