# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the grouping domain."""

from src.core.exceptions import ConflictError, ErrorCode, NotFoundError, ValidationError


class GroupNotFoundError(NotFoundError):
    """Raised when group is not found."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            ErrorCode.GROUP_NOT_FOUND,
            "Group not found",
            {"group_id": group_id},
        )


class InvalidGroupError(ValidationError):
    """Raised when a group request is malformed."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(ErrorCode.INVALID_GROUP, message, field=field)


class NoStudentsAvailableError(ValidationError):
    """Raised when automatic grouping finds every student already grouped."""

    def __init__(self, assignment_id: str) -> None:
        super().__init__(
            ErrorCode.NO_STUDENTS_AVAILABLE,
            "No students available for grouping",
            details={"assignment_id": assignment_id},
        )


class StudentAlreadyGroupedError(ConflictError):
    """Raised when a student already belongs to a group of the assignment.

    Attributes:
        student_ids: The students that are already grouped.
    """

    def __init__(self, student_ids: list[str]) -> None:
        self.student_ids = student_ids
        super().__init__(
            ErrorCode.STUDENT_ALREADY_GROUPED,
            "Student already belongs to a group for this assignment",
            {"student_ids": student_ids},
        )


class StudentNotInGroupError(NotFoundError):
    """Raised when removing a student who is not a member of the group."""

    def __init__(self, group_id: str, student_id: str) -> None:
        super().__init__(
            ErrorCode.STUDENT_NOT_IN_GROUP,
            "Student is not a member of this group",
            {"group_id": group_id, "student_id": student_id},
        )
