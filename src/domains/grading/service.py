# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading service exposing the grading operations to the API layer.

This module provides the GradingService class for:
- Saving group and single-student component grades
- The instructor grading view with provisional averages
- Publishing and hiding grades
- The student grade view behind the visibility gate

Instructor and student views compute averages with the same
compute_average call over the same persisted component records.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import GradingSettings, get_settings
from src.core.exceptions import StorageError
from src.domains.enrollment.guard import has_active_enrollment
from src.domains.grading.aggregation import compute_average
from src.domains.grading.components import ComponentResolver, parse_components
from src.domains.grading.visibility import can_view_grades, ensure_enrolled, format_for_student
from src.domains.grading.writer import GroupGradeWriter, ensure_owner
from src.infrastructure.database.models.academic import ClassSection, Course
from src.infrastructure.database.models.grading import (
    Assignment,
    Grade,
    GradingComponent,
    Group,
    GroupMember,
)
from src.models.grading import (
    AssignmentHeader,
    ComponentView,
    GradeView,
    GradingViewResponse,
    GroupView,
    SaveGroupGradeResponse,
    SaveStudentGradeResponse,
    StudentGradesResponse,
    VisibilityResponse,
)

logger = logging.getLogger(__name__)


def _component_views(
    assignment: Assignment,
    records: list[GradingComponent],
) -> list[ComponentView]:
    record_ids = {record.name: record.id for record in records}
    return [
        ComponentView(
            index=component.index,
            name=component.name,
            weight=component.weight,
            description=component.description,
            deadline=component.deadline,
            component_id=record_ids.get(component.name),
        )
        for component in parse_components(assignment.components)
    ]


def _grade_view(
    grade: Grade,
    component_names: dict[str, str],
    group_id: str | None = None,
) -> GradeView:
    return GradeView(
        id=grade.id,
        component_id=grade.component_id,
        component_name=component_names.get(grade.component_id, ""),
        student_id=grade.student_id,
        score=grade.score,
        feedback=grade.feedback or "",
        group_id=group_id,
    )


class GradingService:
    """Service for assignment grading.

    Attributes:
        db: Async database session.
        settings: Grading bounds and presentation settings.
        resolver: Component resolver.
        writer: Group grade writer.
    """

    def __init__(self, db: AsyncSession, settings: GradingSettings | None = None) -> None:
        """Initialize grading service.

        Args:
            db: Async database session.
            settings: Grading settings, defaults to the application settings.
        """
        self.db = db
        self.settings = settings or get_settings().grading
        self.resolver = ComponentResolver(db)
        self.writer = GroupGradeWriter(
            db,
            resolver=self.resolver,
            min_score=self.settings.min_score,
            max_score=self.settings.max_score,
        )

    async def save_group_grade(
        self,
        assignment_id: str,
        group_id: str,
        component_index: int,
        score: Any,
        feedback: str | None,
        instructor_id: str,
    ) -> SaveGroupGradeResponse:
        """Grade every member of a group on one component.

        All member rows are written in one transaction.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
            ScoreValidationError: If the score is rejected.
            ComponentIndexOutOfRangeError: If the index is invalid.
            GroupNotFoundOrEmptyError: If the group has no members.
            StorageError: If the database write fails.
        """
        try:
            grade_ids = await self.writer.write_group_grade(
                assignment_id,
                group_id,
                component_index,
                score,
                feedback,
                instructor_id,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to save group grade: assignment=%s, error=%s", assignment_id, str(e))
            raise StorageError("Failed to save grade", e) from e

        return SaveGroupGradeResponse(saved_grade_ids=grade_ids, saved_count=len(grade_ids))

    async def save_student_grade(
        self,
        assignment_id: str,
        student_id: str,
        component_index: int,
        score: Any,
        feedback: str | None,
        instructor_id: str,
    ) -> SaveStudentGradeResponse:
        """Grade one student on one component.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
            ScoreValidationError: If the score is rejected.
            StudentNotEnrolledError: If the student is not in the class.
            ComponentIndexOutOfRangeError: If the index is invalid.
            StorageError: If the database write fails.
        """
        try:
            grade_id = await self.writer.write_student_grade(
                assignment_id,
                student_id,
                component_index,
                score,
                feedback,
                instructor_id,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to save student grade: assignment=%s, error=%s", assignment_id, str(e))
            raise StorageError("Failed to save grade", e) from e

        return SaveStudentGradeResponse(grade_id=grade_id)

    async def get_grading_view(self, assignment_id: str, instructor_id: str) -> GradingViewResponse:
        """Build the instructor grading view of an assignment.

        Args:
            assignment_id: Assignment identifier.
            instructor_id: Acting instructor.

        Returns:
            Header, declared components, groups, grade rows and a
            provisional average per student.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)

        header = await self._get_header(assignment)
        records = await self.resolver.list_records(assignment.id)
        component_names = {record.id: record.name for record in records}

        groups_result = await self.db.execute(
            select(Group).where(Group.assignment_id == assignment.id).order_by(Group.name)
        )
        groups = groups_result.scalars().all()

        members_result = await self.db.execute(
            select(GroupMember).where(GroupMember.assignment_id == assignment.id)
        )
        members_by_group: dict[str, list[str]] = defaultdict(list)
        group_of_student: dict[str, str] = {}
        for member in members_result.scalars().all():
            members_by_group[member.group_id].append(member.student_id)
            group_of_student[member.student_id] = member.group_id

        grades_result = await self.db.execute(
            select(Grade)
            .join(GradingComponent, Grade.component_id == GradingComponent.id)
            .where(GradingComponent.assignment_id == assignment.id)
            .order_by(Grade.student_id)
        )
        grades = list(grades_result.scalars().all())

        rows_by_student: dict[str, list[Grade]] = defaultdict(list)
        for grade in grades:
            rows_by_student[grade.student_id].append(grade)

        averages = {
            student_id: compute_average(
                rows_by_student.get(student_id, []),
                records,
                self.settings.average_decimals,
            )
            for student_id in sorted(set(rows_by_student) | set(group_of_student))
        }

        return GradingViewResponse(
            assignment=header,
            components=_component_views(assignment, records),
            groups=[
                GroupView(
                    id=group.id,
                    name=group.name,
                    member_count=len(members_by_group.get(group.id, [])),
                    members=members_by_group.get(group.id, []),
                )
                for group in groups
            ],
            grades=[
                _grade_view(grade, component_names, group_of_student.get(grade.student_id))
                for grade in grades
            ],
            averages=averages,
        )

    async def set_grades_visible(
        self,
        assignment_id: str,
        instructor_id: str,
        visible: bool,
    ) -> VisibilityResponse:
        """Publish or hide an assignment's grades.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)

        assignment.grades_visible = bool(visible)
        await self.db.commit()

        logger.info(
            "Set grade visibility: assignment=%s, visible=%s, by=%s",
            assignment.id,
            assignment.grades_visible,
            instructor_id,
        )

        return VisibilityResponse(assignment_id=assignment.id, grades_visible=assignment.grades_visible)

    async def get_student_grades(self, assignment_id: str, student_id: str) -> StudentGradesResponse:
        """Read a student's own grades on an assignment.

        Args:
            assignment_id: Assignment identifier.
            student_id: Acting student.

        Returns:
            Hidden response with a message while grades are unpublished,
            otherwise the components, the student's grade rows, the
            weighted average and the student's group.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotEnrolledError: If the student is not active in the class.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        enrolled = await has_active_enrollment(self.db, str(student_id), assignment.class_section_id)
        ensure_enrolled(enrolled)

        if not can_view_grades(assignment, enrolled):
            return StudentGradesResponse.model_validate(
                format_for_student(assignment, None, self.settings.hidden_grades_message, enrolled)
            )

        records = await self.resolver.list_records(assignment.id)
        component_names = {record.id: record.name for record in records}

        grades_result = await self.db.execute(
            select(Grade)
            .join(GradingComponent, Grade.component_id == GradingComponent.id)
            .where(
                GradingComponent.assignment_id == assignment.id,
                Grade.student_id == str(student_id),
            )
        )
        grades = list(grades_result.scalars().all())

        group_result = await self.db.execute(
            select(Group.id, Group.name)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(
                GroupMember.assignment_id == assignment.id,
                GroupMember.student_id == str(student_id),
            )
        )
        group = group_result.first()
        group_id = group.id if group else None

        payload = {
            "components": _component_views(assignment, records),
            "grades": [_grade_view(grade, component_names, group_id) for grade in grades],
            "average": compute_average(grades, records, self.settings.average_decimals),
            "group": {"id": group.id, "name": group.name} if group else None,
        }

        return StudentGradesResponse.model_validate(
            format_for_student(assignment, payload, self.settings.hidden_grades_message, enrolled)
        )

    async def _get_header(self, assignment: Assignment) -> AssignmentHeader:
        result = await self.db.execute(
            select(ClassSection.name, Course.code, Course.title)
            .join(Course, Course.id == ClassSection.course_id)
            .where(ClassSection.id == assignment.class_section_id)
        )
        row = result.first()
        return AssignmentHeader(
            id=assignment.id,
            title=assignment.title,
            class_section_id=assignment.class_section_id,
            class_section_name=row.name if row else None,
            course_code=row.code if row else None,
            course_title=row.title if row else None,
            grades_visible=bool(assignment.grades_visible),
        )
