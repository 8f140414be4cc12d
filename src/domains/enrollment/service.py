# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student class-section enrollments.

This module provides the EnrollmentService class for:
- Student enrollment in class sections, gated by EnrollmentGuard
- Enrollment withdrawal
- Section rosters and same-course enrollment listings
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment.exceptions import (
    AlreadyEnrolledError,
    ClassSectionNotFoundError,
    EnrollmentNotActiveError,
    EnrollmentNotFoundError,
)
from src.domains.enrollment.guard import EnrollmentGuard
from src.infrastructure.database.models.academic import (
    ENROLLMENT_ACTIVE,
    ENROLLMENT_WITHDRAWN,
    ClassSection,
    Enrollment,
)
from src.infrastructure.database.models.base import new_id, utc_now
from src.models.enrollment import (
    CourseEnrollmentListResponse,
    CourseEnrollmentSummary,
    EnrollmentListResponse,
    EnrollmentResponse,
    WithdrawResponse,
)

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for managing student enrollments.

    Every enroll call locks the target section row for the rest of the
    transaction so capacity checks on the same section run one at a time.

    Attributes:
        db: Async database session.
        guard: Checks run before any enrollment row is written.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.guard = EnrollmentGuard(db)

    async def enroll(
        self,
        student_id: str,
        class_section_id: str,
        enrolled_by: str | None = None,
    ) -> EnrollmentResponse:
        """Enroll a student in a class section.

        A withdrawn enrollment in the same section is reactivated instead
        of inserting a second row.

        Args:
            student_id: Student identifier.
            class_section_id: Target class section.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Enrollment response.

        Raises:
            ClassSectionNotFoundError: If section not found.
            AlreadyEnrolledError: If student is active in this section.
            DuplicateCourseEnrollmentError: If student is active in another
                section of the same course.
            ClassFullError: If section reached its capacity.
        """
        student_id = str(student_id)
        section = await self._get_section(class_section_id, for_update=True)
        # Plain copies: a rollback below expires the loaded section
        section_id = section.id
        course_id = section.course_id

        existing = await self._get_enrollment(section_id, student_id)
        if existing and existing.status == ENROLLMENT_ACTIVE:
            raise AlreadyEnrolledError(student_id, section_id)

        await self.guard.check_enroll(student_id, section)

        reactivated = existing is not None
        if existing:
            # Reactivate existing enrollment
            existing.status = ENROLLMENT_ACTIVE
            existing.course_id = course_id
            existing.enrolled_at = utc_now()
            existing.withdrawn_at = None
            enrollment = existing
        else:
            enrollment = Enrollment(
                id=new_id(),
                class_section_id=section_id,
                course_id=course_id,
                student_id=student_id,
                status=ENROLLMENT_ACTIVE,
                enrolled_at=utc_now(),
            )
            self.db.add(enrollment)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            conflict = await self.guard.find_course_conflict(student_id, course_id, section_id)
            if conflict:
                logger.info(
                    "Concurrent enrollment lost to index: student=%s, section=%s",
                    student_id,
                    section_id,
                )
                raise conflict from e
            raise AlreadyEnrolledError(student_id, section_id) from e

        await self.db.refresh(enrollment)

        logger.info(
            "%s student: student=%s, section=%s, by=%s",
            "Reactivated" if reactivated else "Enrolled",
            student_id,
            section_id,
            enrolled_by,
        )

        return EnrollmentResponse.model_validate(enrollment)

    async def withdraw(
        self,
        enrollment_id: str,
        withdrawn_by: str | None = None,
    ) -> WithdrawResponse:
        """Withdraw an active enrollment.

        The row is kept with status withdrawn.

        Args:
            enrollment_id: Enrollment identifier.
            withdrawn_by: ID of user performing withdrawal.

        Returns:
            Withdraw response carrying the updated enrollment.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            EnrollmentNotActiveError: If enrollment is not active.
        """
        result = await self.db.execute(
            select(Enrollment).where(Enrollment.id == str(enrollment_id))
        )
        enrollment = result.scalar_one_or_none()
        if not enrollment:
            raise EnrollmentNotFoundError(str(enrollment_id))

        if enrollment.status != ENROLLMENT_ACTIVE:
            raise EnrollmentNotActiveError(enrollment.id, enrollment.status)

        enrollment.status = ENROLLMENT_WITHDRAWN
        enrollment.withdrawn_at = utc_now()

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info(
            "Withdrew student: student=%s, section=%s, by=%s",
            enrollment.student_id,
            enrollment.class_section_id,
            withdrawn_by,
        )

        return WithdrawResponse(enrollment=EnrollmentResponse.model_validate(enrollment))

    async def list_enrollments(
        self,
        class_section_id: str,
        status: str | None = None,
    ) -> EnrollmentListResponse:
        """List enrollments of a class section.

        Args:
            class_section_id: Class section identifier.
            status: Optional status filter (active, withdrawn).

        Raises:
            ClassSectionNotFoundError: If section not found.
        """
        section = await self._get_section(class_section_id)

        query = select(Enrollment).where(Enrollment.class_section_id == section.id)
        if status:
            query = query.where(Enrollment.status == status)
        query = query.order_by(Enrollment.enrolled_at.desc())

        result = await self.db.execute(query)
        items = [EnrollmentResponse.model_validate(e) for e in result.scalars().all()]

        return EnrollmentListResponse(
            class_section_id=section.id,
            class_section_name=section.name,
            items=items,
            total=len(items),
        )

    async def list_course_enrollments(self, class_section_id: str) -> CourseEnrollmentListResponse:
        """List active enrollments in the other sections of the same course.

        Admin tooling uses this to see which students the guard would
        refuse for this section.

        Raises:
            ClassSectionNotFoundError: If section not found.
        """
        section = await self._get_section(class_section_id)

        result = await self.db.execute(
            select(Enrollment.id, Enrollment.student_id, ClassSection.id, ClassSection.name)
            .join(ClassSection, Enrollment.class_section_id == ClassSection.id)
            .where(
                ClassSection.course_id == section.course_id,
                ClassSection.id != section.id,
                Enrollment.status == ENROLLMENT_ACTIVE,
            )
            .order_by(ClassSection.name)
        )

        items = [
            CourseEnrollmentSummary(
                enrollment_id=enrollment_id,
                student_id=student_id,
                class_section_id=section_id,
                class_section_name=section_name,
            )
            for enrollment_id, student_id, section_id, section_name in result.all()
        ]

        return CourseEnrollmentListResponse(
            course_id=section.course_id,
            items=items,
            total=len(items),
        )

    async def _get_section(self, class_section_id: str, for_update: bool = False) -> ClassSection:
        """Get class section by ID.

        Raises:
            ClassSectionNotFoundError: If section not found.
        """
        query = select(ClassSection).where(ClassSection.id == str(class_section_id))
        if for_update:
            query = query.with_for_update()

        result = await self.db.execute(query)
        section = result.scalar_one_or_none()
        if not section:
            raise ClassSectionNotFoundError(str(class_section_id))
        return section

    async def _get_enrollment(self, class_section_id: str, student_id: str) -> Enrollment | None:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.class_section_id == class_section_id,
                Enrollment.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()
