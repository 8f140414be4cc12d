# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Group grade writer.

The group is the unit of grading: one score and feedback pair is copied to
every member's grade row for the chosen component. Storage stays
per-student so each member can later be regraded individually.

The writer never commits. Callers run a whole fan-out in one transaction
so a failure part way through the member loop leaves no partial group
grade behind. Each member row is an upsert keyed by (component, student);
if two requests insert the same row concurrently the loser updates the
winner's row instead (last write wins).
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment.guard import has_active_enrollment
from src.domains.grading.components import ComponentResolver
from src.domains.grading.exceptions import (
    GroupNotFoundOrEmptyError,
    NotOwnerError,
    StudentNotEnrolledError,
)
from src.domains.grading.validator import (
    DEFAULT_MAX_SCORE,
    DEFAULT_MIN_SCORE,
    ensure_valid_score,
)
from src.infrastructure.database.models.base import new_id
from src.infrastructure.database.models.grading import Assignment, Grade, GradingComponent, GroupMember

logger = logging.getLogger(__name__)


def ensure_owner(assignment: Assignment, instructor_id: str) -> None:
    """Check that the instructor owns the assignment.

    Raises:
        NotOwnerError: If the assignment belongs to someone else.
    """
    if str(assignment.instructor_id) != str(instructor_id):
        logger.warning(
            "Ownership check failed: assignment=%s, instructor=%s",
            assignment.id,
            instructor_id,
        )
        raise NotOwnerError()


class GroupGradeWriter:
    """Writes component grades for groups and single students.

    Attributes:
        db: Async database session.
        resolver: Component resolver sharing the same session.
        min_score: Lowest accepted score.
        max_score: Highest accepted score.
    """

    def __init__(
        self,
        db: AsyncSession,
        resolver: ComponentResolver | None = None,
        min_score: float = DEFAULT_MIN_SCORE,
        max_score: float = DEFAULT_MAX_SCORE,
    ) -> None:
        self.db = db
        self.resolver = resolver or ComponentResolver(db)
        self.min_score = min_score
        self.max_score = max_score

    async def write_group_grade(
        self,
        assignment_id: str,
        group_id: str,
        component_index: int,
        score: Any,
        feedback: str | None,
        instructor_id: str,
    ) -> list[str]:
        """Write one score and feedback to every member of a group.

        Args:
            assignment_id: Assignment identifier.
            group_id: Group identifier.
            component_index: Zero-based index into the declared components.
            score: Raw score; None records the component as ungraded.
            feedback: Free-text feedback.
            instructor_id: Acting instructor.

        Returns:
            Identifiers of the grade rows written, one per member.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
            ScoreValidationError: If the score is rejected.
            ComponentIndexOutOfRangeError: If the index is invalid.
            GroupNotFoundOrEmptyError: If the group has no members.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)
        value = ensure_valid_score(score, self.min_score, self.max_score)

        component = await self.resolver.resolve_for(assignment, component_index)

        members = await self._get_member_ids(assignment.id, str(group_id))
        if not members:
            raise GroupNotFoundOrEmptyError(str(group_id))

        grade_ids = []
        for student_id in members:
            grade_id = await self.upsert_grade(
                component, student_id, value, feedback, str(instructor_id)
            )
            grade_ids.append(grade_id)

        logger.info(
            "Wrote group grade: assignment=%s, group=%s, component=%s, rows=%d, by=%s",
            assignment.id,
            group_id,
            component.name,
            len(grade_ids),
            instructor_id,
        )
        return grade_ids

    async def write_student_grade(
        self,
        assignment_id: str,
        student_id: str,
        component_index: int,
        score: Any,
        feedback: str | None,
        instructor_id: str,
    ) -> str:
        """Write one student's grade on one component.

        Returns:
            Identifier of the grade row written.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
            ScoreValidationError: If the score is rejected.
            StudentNotEnrolledError: If the student is not active in the
                assignment's class section.
            ComponentIndexOutOfRangeError: If the index is invalid.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)
        value = ensure_valid_score(score, self.min_score, self.max_score)

        if not await has_active_enrollment(self.db, str(student_id), assignment.class_section_id):
            raise StudentNotEnrolledError(str(student_id))

        component = await self.resolver.resolve_for(assignment, component_index)
        grade_id = await self.upsert_grade(
            component, str(student_id), value, feedback, str(instructor_id)
        )

        logger.info(
            "Wrote student grade: assignment=%s, student=%s, component=%s, by=%s",
            assignment.id,
            student_id,
            component.name,
            instructor_id,
        )
        return grade_id

    async def upsert_grade(
        self,
        component: GradingComponent,
        student_id: str,
        score: float | None,
        feedback: str | None,
        graded_by: str,
    ) -> str:
        """Insert or update the grade row for (component, student).

        Returns:
            Identifier of the grade row.
        """
        existing = await self._get_grade(component.id, student_id)
        if existing:
            self._apply(existing, score, feedback, graded_by)
            return existing.id

        grade = Grade(
            id=new_id(),
            component_id=component.id,
            student_id=student_id,
            score=score,
            feedback=feedback or "",
            graded_by=graded_by,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(grade)
                await self.db.flush()
        except IntegrityError:
            existing = await self._get_grade(component.id, student_id)
            if existing is None:
                raise
            self._apply(existing, score, feedback, graded_by)
            return existing.id

        return grade.id

    async def _get_member_ids(self, assignment_id: str, group_id: str) -> list[str]:
        result = await self.db.execute(
            select(GroupMember.student_id)
            .where(
                GroupMember.group_id == group_id,
                GroupMember.assignment_id == assignment_id,
            )
            .order_by(GroupMember.joined_at)
        )
        return list(result.scalars().all())

    async def _get_grade(self, component_id: str, student_id: str) -> Grade | None:
        result = await self.db.execute(
            select(Grade).where(
                Grade.component_id == component_id,
                Grade.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _apply(grade: Grade, score: float | None, feedback: str | None, graded_by: str) -> None:
        grade.score = score
        grade.feedback = feedback or ""
        grade.graded_by = graded_by
