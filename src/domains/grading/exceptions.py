# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the grading domain."""

from src.core.exceptions import (
    AuthorizationError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)


class ScoreValidationError(ValidationError):
    """Raised when a submitted score is rejected by the validator."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(code, message, field="score")


class ComponentIndexOutOfRangeError(ValidationError):
    """Raised when a component index does not address a declared component."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(
            ErrorCode.COMPONENT_INDEX_OUT_OF_RANGE,
            f"Component index {index} is out of range (assignment declares {count})",
            field="component_index",
            details={"index": index, "count": count},
        )


class AssignmentNotFoundError(NotFoundError):
    """Raised when assignment is not found."""

    def __init__(self, assignment_id: str) -> None:
        super().__init__(
            ErrorCode.ASSIGNMENT_NOT_FOUND,
            "Assignment not found",
            {"assignment_id": assignment_id},
        )


class GroupNotFoundOrEmptyError(NotFoundError):
    """Raised when a group does not exist or has no members."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            ErrorCode.GROUP_NOT_FOUND_OR_EMPTY,
            "Group not found or has no members",
            {"group_id": group_id},
        )


class StudentNotEnrolledError(NotFoundError):
    """Raised when a graded student has no active enrollment in the section."""

    def __init__(self, student_id: str) -> None:
        super().__init__(
            ErrorCode.STUDENT_NOT_ENROLLED,
            "Student is not enrolled in this class",
            {"student_id": student_id},
        )


class NotOwnerError(AuthorizationError):
    """Raised when the acting instructor does not own the assignment."""

    def __init__(self) -> None:
        super().__init__(
            ErrorCode.NOT_OWNER,
            "You do not have access to this assignment",
        )


class NotEnrolledError(AuthorizationError):
    """Raised when a student reads grades of a class they are not enrolled in."""

    def __init__(self) -> None:
        super().__init__(
            ErrorCode.NOT_ENROLLED,
            "You are not enrolled in the class for this assignment",
        )
