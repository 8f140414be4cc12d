# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment grading API endpoints.

Instructor endpoints (assignment owner only):
- GET /{assignment_id}/grading - Grading view with provisional averages
- POST /{assignment_id}/grades/group - Grade every member of a group
- POST /{assignment_id}/grades/student - Grade a single student
- PUT /{assignment_id}/grades/visibility - Publish or hide grades

Student endpoints:
- GET /{assignment_id}/grades/me - Own grades, once published

Domain errors are rendered by the application's CoreError handler.
"""

import logging

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import DatabaseSession, InstructorUser, StudentUser
from src.domains.grading.service import GradingService
from src.models.grading import (
    GradingViewResponse,
    SaveGroupGradeRequest,
    SaveGroupGradeResponse,
    SaveStudentGradeRequest,
    SaveStudentGradeResponse,
    StudentGradesResponse,
    VisibilityRequest,
    VisibilityResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> GradingService:
    """Create grading service instance.

    Args:
        db: Database session.

    Returns:
        GradingService instance.
    """
    return GradingService(db=db)


@router.get(
    "/{assignment_id}/grading",
    response_model=GradingViewResponse,
    summary="Get grading view",
)
async def get_grading_view(
    assignment_id: str,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> GradingViewResponse:
    """Get components, groups, grades and averages of an assignment."""
    service = _get_service(db)
    return await service.get_grading_view(assignment_id, instructor_id=current_user.id)


@router.post(
    "/{assignment_id}/grades/group",
    response_model=SaveGroupGradeResponse,
    summary="Save group grade",
)
async def save_group_grade(
    assignment_id: str,
    data: SaveGroupGradeRequest,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> SaveGroupGradeResponse:
    """Grade every member of a group on one component.

    Args:
        assignment_id: Assignment identifier.
        data: Group, component index, score and feedback.
        current_user: Authenticated instructor.
        db: Database session.

    Returns:
        Identifiers of the grade rows written.
    """
    logger.info(
        "Saving group grade: assignment=%s, group=%s, component=%d, by=%s",
        assignment_id,
        data.group_id,
        data.component_index,
        current_user.id,
    )

    service = _get_service(db)
    return await service.save_group_grade(
        assignment_id,
        group_id=data.group_id,
        component_index=data.component_index,
        score=data.score,
        feedback=data.feedback,
        instructor_id=current_user.id,
    )


@router.post(
    "/{assignment_id}/grades/student",
    response_model=SaveStudentGradeResponse,
    summary="Save student grade",
)
async def save_student_grade(
    assignment_id: str,
    data: SaveStudentGradeRequest,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> SaveStudentGradeResponse:
    """Grade a single student on one component."""
    service = _get_service(db)
    return await service.save_student_grade(
        assignment_id,
        student_id=data.student_id,
        component_index=data.component_index,
        score=data.score,
        feedback=data.feedback,
        instructor_id=current_user.id,
    )


@router.put(
    "/{assignment_id}/grades/visibility",
    response_model=VisibilityResponse,
    summary="Set grade visibility",
)
async def set_grades_visible(
    assignment_id: str,
    data: VisibilityRequest,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> VisibilityResponse:
    """Publish or hide an assignment's grades."""
    service = _get_service(db)
    return await service.set_grades_visible(
        assignment_id,
        instructor_id=current_user.id,
        visible=data.visible,
    )


@router.get(
    "/{assignment_id}/grades/me",
    response_model=StudentGradesResponse,
    summary="Get own grades",
)
async def get_my_grades(
    assignment_id: str,
    current_user: StudentUser,
    db: DatabaseSession,
) -> StudentGradesResponse:
    """Get the authenticated student's grades on an assignment.

    Returns ``visible: false`` with a message until the instructor
    publishes grades.
    """
    service = _get_service(db)
    return await service.get_student_grades(assignment_id, student_id=current_user.id)
