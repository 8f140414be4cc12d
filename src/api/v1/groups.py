# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Group formation API endpoints.

Instructor endpoints (assignment owner only):
- POST /assignments/{assignment_id}/groups - Create a group manually
- POST /assignments/{assignment_id}/groups/auto - Balanced automatic grouping
- GET /assignments/{assignment_id}/groups/available-students - Ungrouped students
- POST /groups/{group_id}/members - Add a member
- DELETE /groups/{group_id}/members/{student_id} - Remove a member
- DELETE /groups/{group_id} - Delete a group

Domain errors are rendered by the application's CoreError handler.
"""

import logging

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import DatabaseSession, InstructorUser
from src.domains.grouping.service import GroupService
from src.models.grouping import (
    AutoGroupRequest,
    AutoGroupResponse,
    AvailableStudentsResponse,
    CreateGroupRequest,
    DeleteGroupResponse,
    GroupMemberRequest,
    GroupResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_group_service(db: AsyncSession) -> GroupService:
    """Create group service instance."""
    return GroupService(db=db)


@router.post(
    "/assignments/{assignment_id}/groups",
    response_model=GroupResponse,
    summary="Create group",
)
async def create_group(
    assignment_id: str,
    data: CreateGroupRequest,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> GroupResponse:
    """Create a group from an explicit list of enrolled students.

    Args:
        assignment_id: Assignment identifier.
        data: Group name and members.
        current_user: Authenticated instructor.
        db: Database session.

    Returns:
        The created group.
    """
    logger.info(
        "Creating group: assignment=%s, members=%d, by=%s",
        assignment_id,
        len(data.members),
        current_user.id,
    )

    service = _get_group_service(db)
    return await service.create_group(
        assignment_id,
        name=data.name,
        member_ids=data.members,
        instructor_id=current_user.id,
    )


@router.post(
    "/assignments/{assignment_id}/groups/auto",
    response_model=AutoGroupResponse,
    summary="Create groups automatically",
)
async def create_groups_automatically(
    assignment_id: str,
    data: AutoGroupRequest,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> AutoGroupResponse:
    """Split the ungrouped students of the section into balanced groups."""
    service = _get_group_service(db)
    return await service.create_groups_automatically(
        assignment_id,
        group_size=data.group_size,
        instructor_id=current_user.id,
    )


@router.get(
    "/assignments/{assignment_id}/groups/available-students",
    response_model=AvailableStudentsResponse,
    summary="List students available for grouping",
)
async def list_available_students(
    assignment_id: str,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> AvailableStudentsResponse:
    """List active students of the section who are in no group yet."""
    service = _get_group_service(db)
    return await service.list_available_students(assignment_id, instructor_id=current_user.id)


@router.post(
    "/groups/{group_id}/members",
    response_model=GroupResponse,
    summary="Add group member",
)
async def add_member(
    group_id: str,
    data: GroupMemberRequest,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> GroupResponse:
    """Add an enrolled student to a group."""
    service = _get_group_service(db)
    return await service.add_member(group_id, data.student_id, instructor_id=current_user.id)


@router.delete(
    "/groups/{group_id}/members/{student_id}",
    response_model=GroupResponse,
    summary="Remove group member",
)
async def remove_member(
    group_id: str,
    student_id: str,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> GroupResponse:
    """Remove a student from a group."""
    service = _get_group_service(db)
    return await service.remove_member(group_id, student_id, instructor_id=current_user.id)


@router.delete(
    "/groups/{group_id}",
    response_model=DeleteGroupResponse,
    summary="Delete group",
)
async def delete_group(
    group_id: str,
    current_user: InstructorUser,
    db: DatabaseSession,
) -> DeleteGroupResponse:
    """Delete a group and its memberships."""
    service = _get_group_service(db)
    return await service.delete_group(group_id, instructor_id=current_user.id)
