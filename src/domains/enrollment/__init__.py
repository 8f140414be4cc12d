# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides student enrollment management functionality including:
- The one-active-section-per-course guard and capacity check
- Student enrollment and re-enrollment in class sections
- Enrollment withdrawal
"""

from src.domains.enrollment.exceptions import (
    AlreadyEnrolledError,
    ClassFullError,
    ClassSectionNotFoundError,
    DuplicateCourseEnrollmentError,
    EnrollmentNotActiveError,
    EnrollmentNotFoundError,
)
from src.domains.enrollment.guard import EnrollmentGuard, has_active_enrollment
from src.domains.enrollment.service import EnrollmentService

__all__ = [
    "EnrollmentService",
    "EnrollmentGuard",
    "has_active_enrollment",
    "AlreadyEnrolledError",
    "ClassFullError",
    "ClassSectionNotFoundError",
    "DuplicateCourseEnrollmentError",
    "EnrollmentNotActiveError",
    "EnrollmentNotFoundError",
]
