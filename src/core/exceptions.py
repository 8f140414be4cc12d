# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the grading and enrollment domains.

Every failure raised by a core operation carries a stable reason code
(ErrorCode) and a human-readable message. The API layer maps the error
category to an HTTP status:

- ValidationError: user-correctable input problem (400)
- AuthorizationError: caller does not own / is not enrolled (403)
- NotFoundError: referenced entity is missing (404)
- ConflictError: operation conflicts with current state (409)
- StorageError: relational store failure, never exposes internals (500)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-checkable reason codes."""

    NOT_A_NUMBER = "NotANumber"
    BELOW_MINIMUM = "BelowMinimum"
    ABOVE_MAXIMUM = "AboveMaximum"
    COMPONENT_INDEX_OUT_OF_RANGE = "ComponentIndexOutOfRange"
    ASSIGNMENT_NOT_FOUND = "AssignmentNotFound"
    GROUP_NOT_FOUND_OR_EMPTY = "GroupNotFoundOrEmpty"
    GROUP_NOT_FOUND = "GroupNotFound"
    INVALID_GROUP = "InvalidGroup"
    NO_STUDENTS_AVAILABLE = "NoStudentsAvailable"
    STUDENT_ALREADY_GROUPED = "StudentAlreadyGrouped"
    STUDENT_NOT_IN_GROUP = "StudentNotInGroup"
    NOT_OWNER = "NotOwner"
    NOT_ENROLLED = "NotEnrolled"
    STUDENT_NOT_ENROLLED = "StudentNotEnrolled"
    DUPLICATE_COURSE_ENROLLMENT = "DuplicateCourseEnrollment"
    ALREADY_ENROLLED = "AlreadyEnrolled"
    CLASS_FULL = "ClassFull"
    CLASS_SECTION_NOT_FOUND = "ClassSectionNotFound"
    ENROLLMENT_NOT_FOUND = "EnrollmentNotFound"
    ENROLLMENT_NOT_ACTIVE = "EnrollmentNotActive"
    STORAGE_FAILURE = "StorageFailure"


class CoreError(Exception):
    """Base exception for all core operation failures.

    Attributes:
        code: Stable reason code.
        message: Human-readable error description.
        details: Extra structured context safe to show the caller.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for an API response body."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(CoreError):
    """Raised when caller input is invalid.

    Attributes:
        field: Name of the offending input field.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code, message, details)
        self.field = field
        if field:
            self.details.setdefault("field", field)


class AuthorizationError(CoreError):
    """Raised when the acting principal may not touch the resource."""

    pass


class NotFoundError(CoreError):
    """Raised when a referenced entity does not exist."""

    pass


class ConflictError(CoreError):
    """Raised when an operation conflicts with persisted state."""

    pass


class StorageError(CoreError):
    """Raised when the relational store fails.

    The original exception is kept for logging only and never rendered.

    Attributes:
        original_error: The underlying SQLAlchemy or driver error.
    """

    def __init__(
        self,
        message: str = "Storage operation failed",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.STORAGE_FAILURE, message)
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message
