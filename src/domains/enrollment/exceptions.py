# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the enrollment domain."""

from src.core.exceptions import ConflictError, ErrorCode, NotFoundError


class ClassSectionNotFoundError(NotFoundError):
    """Raised when class section is not found."""

    def __init__(self, class_section_id: str) -> None:
        super().__init__(
            ErrorCode.CLASS_SECTION_NOT_FOUND,
            "Class section not found",
            {"class_section_id": class_section_id},
        )


class EnrollmentNotFoundError(NotFoundError):
    """Raised when enrollment is not found."""

    def __init__(self, enrollment_id: str) -> None:
        super().__init__(
            ErrorCode.ENROLLMENT_NOT_FOUND,
            "Enrollment not found",
            {"enrollment_id": enrollment_id},
        )


class AlreadyEnrolledError(ConflictError):
    """Raised when student is already active in the same class section."""

    def __init__(self, student_id: str, class_section_id: str) -> None:
        super().__init__(
            ErrorCode.ALREADY_ENROLLED,
            "Student is already enrolled in this class",
            {"student_id": student_id, "class_section_id": class_section_id},
        )


class DuplicateCourseEnrollmentError(ConflictError):
    """Raised when student is already active in another section of the course.

    Attributes:
        class_section_id: The conflicting section.
        class_section_name: Display name of the conflicting section.
        course_code: Code of the shared course.
        course_title: Title of the shared course.
    """

    def __init__(
        self,
        class_section_id: str,
        class_section_name: str,
        course_code: str,
        course_title: str,
    ) -> None:
        self.class_section_id = class_section_id
        self.class_section_name = class_section_name
        self.course_code = course_code
        self.course_title = course_title
        super().__init__(
            ErrorCode.DUPLICATE_COURSE_ENROLLMENT,
            f"Student is already enrolled in class {class_section_name} "
            f"for course {course_title} ({course_code})",
            {
                "class_section_id": class_section_id,
                "class_section_name": class_section_name,
                "course_code": course_code,
                "course_title": course_title,
            },
        )


class ClassFullError(ConflictError):
    """Raised when the class section has no free seat."""

    def __init__(self, class_section_id: str, capacity: int) -> None:
        super().__init__(
            ErrorCode.CLASS_FULL,
            f"Class is full (capacity {capacity})",
            {"class_section_id": class_section_id, "capacity": capacity},
        )


class EnrollmentNotActiveError(ConflictError):
    """Raised when withdrawing an enrollment that is not active."""

    def __init__(self, enrollment_id: str, status: str) -> None:
        super().__init__(
            ErrorCode.ENROLLMENT_NOT_ACTIVE,
            "Enrollment is not active",
            {"enrollment_id": enrollment_id, "status": status},
        )
