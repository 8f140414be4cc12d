# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment guard.

A student may hold at most one active enrollment per course, across every
class section of that course, and a section may not exceed its capacity.
EnrollmentService runs the guard before writing any enrollment row.

The checks here give callers a readable error. Under concurrency the
partial unique index uq_enrollments_active_student_course is what actually
holds the invariant; EnrollmentService translates its violation back into
DuplicateCourseEnrollmentError.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment.exceptions import ClassFullError, DuplicateCourseEnrollmentError
from src.infrastructure.database.models.academic import (
    ENROLLMENT_ACTIVE,
    ClassSection,
    Course,
    Enrollment,
)

logger = logging.getLogger(__name__)


async def has_active_enrollment(db: AsyncSession, student_id: str, class_section_id: str) -> bool:
    """Check if a student holds an active enrollment in a class section."""
    result = await db.execute(
        select(Enrollment.id).where(
            Enrollment.class_section_id == class_section_id,
            Enrollment.student_id == student_id,
            Enrollment.status == ENROLLMENT_ACTIVE,
        )
    )
    return result.scalar_one_or_none() is not None


class EnrollmentGuard:
    """Checks run before a student is enrolled in a class section.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def check_enroll(self, student_id: str, section: ClassSection) -> None:
        """Check that the student may take a seat in the section.

        Args:
            student_id: Student identifier.
            section: Target class section.

        Raises:
            DuplicateCourseEnrollmentError: If the student is active in
                another section of the same course.
            ClassFullError: If the section reached its capacity.
        """
        conflict = await self.find_course_conflict(student_id, section.course_id, section.id)
        if conflict:
            logger.info(
                "Enrollment blocked, active in another section: student=%s, section=%s, conflicting=%s",
                student_id,
                section.id,
                conflict.class_section_id,
            )
            raise conflict

        if section.capacity is not None:
            taken = await self.count_active(section.id)
            if taken >= section.capacity:
                logger.info(
                    "Enrollment blocked, class full: student=%s, section=%s, capacity=%d",
                    student_id,
                    section.id,
                    section.capacity,
                )
                raise ClassFullError(section.id, section.capacity)

    async def find_course_conflict(
        self,
        student_id: str,
        course_id: str,
        class_section_id: str,
    ) -> DuplicateCourseEnrollmentError | None:
        """Find an active enrollment in another section of the same course.

        Takes plain identifiers so it can run after a rollback has expired
        the loaded section.

        Args:
            student_id: Student identifier.
            course_id: Course of the target section.
            class_section_id: Target section, excluded from the search.

        Returns:
            The error describing the conflicting section, or None.
        """
        result = await self.db.execute(
            select(ClassSection.id, ClassSection.name, Course.code, Course.title)
            .join(Enrollment, Enrollment.class_section_id == ClassSection.id)
            .join(Course, Course.id == ClassSection.course_id)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.status == ENROLLMENT_ACTIVE,
                ClassSection.course_id == course_id,
                ClassSection.id != class_section_id,
            )
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return DuplicateCourseEnrollmentError(
            class_section_id=row.id,
            class_section_name=row.name,
            course_code=row.code,
            course_title=row.title,
        )

    async def count_active(self, class_section_id: str) -> int:
        """Count active enrollments in a class section."""
        result = await self.db.execute(
            select(func.count())
            .select_from(Enrollment)
            .where(
                Enrollment.class_section_id == class_section_id,
                Enrollment.status == ENROLLMENT_ACTIVE,
            )
        )
        return result.scalar_one()
