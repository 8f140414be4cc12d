# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

Class section endpoints:
- POST /class-sections/{class_section_id}/enrollments - Enroll a student
- GET /class-sections/{class_section_id}/enrollments - List the roster
- GET /class-sections/{class_section_id}/course-enrollments - Students active
  in other sections of the same course

Enrollment endpoints:
- POST /enrollments/{enrollment_id}/withdraw - Withdraw a student

Enrollment management requires admin access.
"""

import logging

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import AdminUser, DatabaseSession
from src.domains.enrollment.service import EnrollmentService
from src.models.enrollment import (
    CourseEnrollmentListResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
    WithdrawResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_enrollment_service(db: AsyncSession) -> EnrollmentService:
    """Create enrollment service instance.

    Args:
        db: Database session.

    Returns:
        EnrollmentService instance.
    """
    return EnrollmentService(db=db)


@router.post(
    "/class-sections/{class_section_id}/enrollments",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
)
async def enroll_student(
    class_section_id: str,
    data: EnrollRequest,
    current_user: AdminUser,
    db: DatabaseSession,
) -> EnrollmentResponse:
    """Enroll a student in a class section.

    Args:
        class_section_id: Class section identifier.
        data: Enrollment request.
        current_user: Authenticated admin.
        db: Database session.

    Returns:
        Enrollment response.
    """
    logger.info(
        "Enrolling student: student=%s, section=%s, by=%s",
        data.student_id,
        class_section_id,
        current_user.id,
    )

    service = _get_enrollment_service(db)
    return await service.enroll(
        student_id=data.student_id,
        class_section_id=class_section_id,
        enrolled_by=current_user.id,
    )


@router.get(
    "/class-sections/{class_section_id}/enrollments",
    response_model=EnrollmentListResponse,
    summary="List section enrollments",
)
async def list_enrollments(
    class_section_id: str,
    current_user: AdminUser,
    db: DatabaseSession,
    status_filter: str | None = Query(None, alias="status", pattern="^(active|withdrawn)$"),
) -> EnrollmentListResponse:
    """List enrollments of a class section, optionally by status."""
    service = _get_enrollment_service(db)
    return await service.list_enrollments(class_section_id, status=status_filter)


@router.get(
    "/class-sections/{class_section_id}/course-enrollments",
    response_model=CourseEnrollmentListResponse,
    summary="List same-course enrollments",
)
async def list_course_enrollments(
    class_section_id: str,
    current_user: AdminUser,
    db: DatabaseSession,
) -> CourseEnrollmentListResponse:
    """List students active in the other sections of this section's course."""
    service = _get_enrollment_service(db)
    return await service.list_course_enrollments(class_section_id)


@router.post(
    "/enrollments/{enrollment_id}/withdraw",
    response_model=WithdrawResponse,
    summary="Withdraw enrollment",
)
async def withdraw_enrollment(
    enrollment_id: str,
    current_user: AdminUser,
    db: DatabaseSession,
) -> WithdrawResponse:
    """Withdraw a student from a class section."""
    service = _get_enrollment_service(db)
    return await service.withdraw(enrollment_id, withdrawn_by=current_user.id)
