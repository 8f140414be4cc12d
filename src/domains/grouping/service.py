# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Group service for forming the groups an assignment is graded by.

This module provides the GroupService class for:
- Manual group creation with an explicit member list
- Automatic balanced grouping of the students not yet grouped
- Adding and removing members, and deleting a group
- Listing the students of the section still available for grouping

Every member must hold an active enrollment in the assignment's class
section. A student belongs to at most one group per assignment; the
uq_group_members_assignment_student constraint holds that under
concurrency and its violation is reported as StudentAlreadyGroupedError.
"""

from __future__ import annotations

import logging
import math
import random
import string

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.grading.components import ComponentResolver
from src.domains.grading.exceptions import StudentNotEnrolledError
from src.domains.grading.writer import ensure_owner
from src.domains.grouping.exceptions import (
    GroupNotFoundError,
    InvalidGroupError,
    NoStudentsAvailableError,
    StudentAlreadyGroupedError,
    StudentNotInGroupError,
)
from src.infrastructure.database.models.academic import ENROLLMENT_ACTIVE, Enrollment
from src.infrastructure.database.models.base import new_id
from src.infrastructure.database.models.grading import Assignment, Group, GroupMember
from src.models.grouping import (
    AutoGroupResponse,
    AvailableStudentsResponse,
    DeleteGroupResponse,
    GroupResponse,
)

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 1
MAX_GROUP_SIZE = 20


def split_balanced(student_ids: list[str], group_size: int) -> list[list[str]]:
    """Split students into the fewest groups of at most group_size.

    Students are dealt out in turn, so group sizes differ by at most one.

    >>> split_balanced(["a", "b", "c", "d", "e"], 2)
    [['a', 'd'], ['b', 'e'], ['c']]
    """
    if not student_ids:
        return []
    group_count = math.ceil(len(student_ids) / group_size)
    return [student_ids[i::group_count] for i in range(group_count)]


def next_group_names(existing: set[str], count: int) -> list[str]:
    """Pick the next unused names in the sequence Group A ... Group Z, Group 27 ..."""
    names: list[str] = []
    position = 0
    while len(names) < count:
        if position < len(string.ascii_uppercase):
            label = string.ascii_uppercase[position]
        else:
            label = str(position + 1)
        name = f"Group {label}"
        if name not in existing:
            names.append(name)
        position += 1
    return names


def _clean_member_ids(member_ids: list[str] | None) -> list[str]:
    members = [str(member_id).strip() for member_id in member_ids or []]
    if not members or not all(members):
        raise InvalidGroupError("A group needs at least one member", field="members")
    if len(set(members)) != len(members):
        raise InvalidGroupError("A student is listed more than once", field="members")
    return members


class GroupService:
    """Service for group formation.

    Attributes:
        db: Async database session.
        resolver: Loads assignments for ownership checks.
    """

    def __init__(self, db: AsyncSession, resolver: ComponentResolver | None = None) -> None:
        """Initialize group service.

        Args:
            db: Async database session.
            resolver: Component resolver sharing the same session.
        """
        self.db = db
        self.resolver = resolver or ComponentResolver(db)

    async def create_group(
        self,
        assignment_id: str,
        name: str,
        member_ids: list[str],
        instructor_id: str,
    ) -> GroupResponse:
        """Create a group with an explicit member list.

        Args:
            assignment_id: Assignment identifier.
            name: Group display name.
            member_ids: Students to place in the group.
            instructor_id: Acting instructor.

        Returns:
            The created group.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
            InvalidGroupError: If the name or member list is malformed.
            StudentNotEnrolledError: If a member is not active in the section.
            StudentAlreadyGroupedError: If a member is already grouped.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)
        assignment_id = assignment.id

        name = (name or "").strip()
        if not name:
            raise InvalidGroupError("Group name is required", field="name")
        members = _clean_member_ids(member_ids)

        await self._check_candidates(assignment, members)

        group_id = new_id()
        self.db.add(Group(id=group_id, assignment_id=assignment_id, name=name))
        self.db.add_all(
            [
                GroupMember(group_id=group_id, assignment_id=assignment_id, student_id=student_id)
                for student_id in members
            ]
        )
        await self._commit(assignment_id, members)

        logger.info(
            "Created group: assignment=%s, group=%s, members=%d, by=%s",
            assignment_id,
            group_id,
            len(members),
            instructor_id,
        )

        return GroupResponse(id=group_id, assignment_id=assignment_id, name=name, members=members)

    async def create_groups_automatically(
        self,
        assignment_id: str,
        group_size: int,
        instructor_id: str,
        shuffle: bool = True,
    ) -> AutoGroupResponse:
        """Split the section's ungrouped students into balanced groups.

        Args:
            assignment_id: Assignment identifier.
            group_size: Largest allowed group size.
            instructor_id: Acting instructor.
            shuffle: Randomize the order students are dealt out in.

        Returns:
            The groups created, named after the existing ones.

        Raises:
            InvalidGroupError: If group_size is outside [1, 20].
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
            NoStudentsAvailableError: If every student is already grouped.
            StudentAlreadyGroupedError: If a concurrent request grouped a
                student first.
        """
        if (
            isinstance(group_size, bool)
            or not isinstance(group_size, int)
            or not MIN_GROUP_SIZE <= group_size <= MAX_GROUP_SIZE
        ):
            raise InvalidGroupError(
                f"Group size must be a number between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}",
                field="group_size",
            )

        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)
        assignment_id = assignment.id

        available = await self._available_student_ids(assignment_id, assignment.class_section_id)
        if not available:
            raise NoStudentsAvailableError(assignment_id)
        if shuffle:
            random.shuffle(available)

        names_result = await self.db.execute(select(Group.name).where(Group.assignment_id == assignment_id))
        chunks = split_balanced(available, group_size)
        names = next_group_names(set(names_result.scalars().all()), len(chunks))

        groups = []
        for name, members in zip(names, chunks):
            group_id = new_id()
            self.db.add(Group(id=group_id, assignment_id=assignment_id, name=name))
            self.db.add_all(
                [
                    GroupMember(group_id=group_id, assignment_id=assignment_id, student_id=student_id)
                    for student_id in members
                ]
            )
            groups.append(GroupResponse(id=group_id, assignment_id=assignment_id, name=name, members=members))

        await self._commit(assignment_id, available)

        logger.info(
            "Created groups automatically: assignment=%s, groups=%d, students=%d, size=%d, by=%s",
            assignment_id,
            len(groups),
            len(available),
            group_size,
            instructor_id,
        )

        return AutoGroupResponse(groups=groups, total_groups=len(groups))

    async def add_member(self, group_id: str, student_id: str, instructor_id: str) -> GroupResponse:
        """Add a student to an existing group.

        Raises:
            GroupNotFoundError: If group not found.
            NotOwnerError: If the instructor does not own the assignment.
            StudentNotEnrolledError: If the student is not active in the section.
            StudentAlreadyGroupedError: If the student is already grouped.
        """
        group, assignment = await self._get_owned_group(group_id, instructor_id)
        group_id, group_name = group.id, group.name
        assignment_id = assignment.id
        members = _clean_member_ids([student_id])

        await self._check_candidates(assignment, members)

        self.db.add(GroupMember(group_id=group_id, assignment_id=assignment_id, student_id=members[0]))
        await self._commit(assignment_id, members)

        logger.info(
            "Added group member: group=%s, student=%s, by=%s",
            group_id,
            members[0],
            instructor_id,
        )

        return await self._group_response(group_id, assignment_id, group_name)

    async def remove_member(self, group_id: str, student_id: str, instructor_id: str) -> GroupResponse:
        """Remove a student from a group.

        The student's grade rows are kept.

        Raises:
            GroupNotFoundError: If group not found.
            NotOwnerError: If the instructor does not own the assignment.
            StudentNotInGroupError: If the student is not a member.
        """
        group, assignment = await self._get_owned_group(group_id, instructor_id)
        group_id, group_name = group.id, group.name
        student_id = str(student_id)

        result = await self.db.execute(
            select(GroupMember.id).where(
                GroupMember.group_id == group_id,
                GroupMember.student_id == student_id,
            )
        )
        member_id = result.scalar_one_or_none()
        if member_id is None:
            raise StudentNotInGroupError(group_id, student_id)

        await self.db.execute(delete(GroupMember).where(GroupMember.id == member_id))
        await self.db.commit()

        logger.info(
            "Removed group member: group=%s, student=%s, by=%s",
            group_id,
            student_id,
            instructor_id,
        )

        return await self._group_response(group_id, assignment.id, group_name)

    async def delete_group(self, group_id: str, instructor_id: str) -> DeleteGroupResponse:
        """Delete a group and its memberships.

        Members become available for grouping again; their grade rows
        are kept.

        Raises:
            GroupNotFoundError: If group not found.
            NotOwnerError: If the instructor does not own the assignment.
        """
        group, _ = await self._get_owned_group(group_id, instructor_id)
        group_id = group.id

        await self.db.execute(delete(GroupMember).where(GroupMember.group_id == group_id))
        await self.db.execute(delete(Group).where(Group.id == group_id))
        await self.db.commit()

        logger.info("Deleted group: group=%s, by=%s", group_id, instructor_id)

        return DeleteGroupResponse(group_id=group_id)

    async def list_available_students(
        self,
        assignment_id: str,
        instructor_id: str,
    ) -> AvailableStudentsResponse:
        """List active students of the section who are in no group yet.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            NotOwnerError: If the instructor does not own the assignment.
        """
        assignment = await self.resolver.get_assignment(assignment_id)
        ensure_owner(assignment, instructor_id)

        student_ids = await self._available_student_ids(assignment.id, assignment.class_section_id)

        return AvailableStudentsResponse(
            assignment_id=assignment.id,
            student_ids=student_ids,
            total=len(student_ids),
        )

    async def _get_owned_group(self, group_id: str, instructor_id: str) -> tuple[Group, Assignment]:
        result = await self.db.execute(select(Group).where(Group.id == str(group_id)))
        group = result.scalar_one_or_none()
        if not group:
            raise GroupNotFoundError(str(group_id))

        assignment = await self.resolver.get_assignment(group.assignment_id)
        ensure_owner(assignment, instructor_id)
        return group, assignment

    async def _check_candidates(self, assignment: Assignment, members: list[str]) -> None:
        """Check members are active in the section and not grouped yet.

        Raises:
            StudentNotEnrolledError: If a member is not active in the section.
            StudentAlreadyGroupedError: If a member is already grouped.
        """
        enrolled_result = await self.db.execute(
            select(Enrollment.student_id).where(
                Enrollment.class_section_id == assignment.class_section_id,
                Enrollment.status == ENROLLMENT_ACTIVE,
                Enrollment.student_id.in_(members),
            )
        )
        enrolled = set(enrolled_result.scalars().all())
        for student_id in members:
            if student_id not in enrolled:
                raise StudentNotEnrolledError(student_id)

        grouped = await self._grouped_among(assignment.id, members)
        if grouped:
            logger.info(
                "Grouping blocked, already grouped: assignment=%s, students=%s",
                assignment.id,
                grouped,
            )
            raise StudentAlreadyGroupedError(grouped)

    async def _commit(self, assignment_id: str, members: list[str]) -> None:
        """Commit a grouping write, translating a lost race on the unique constraint."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            grouped = await self._grouped_among(assignment_id, members)
            logger.info(
                "Concurrent grouping lost to constraint: assignment=%s, students=%s",
                assignment_id,
                grouped,
            )
            raise StudentAlreadyGroupedError(grouped or members) from e

    async def _grouped_among(self, assignment_id: str, members: list[str]) -> list[str]:
        result = await self.db.execute(
            select(GroupMember.student_id)
            .where(
                GroupMember.assignment_id == assignment_id,
                GroupMember.student_id.in_(members),
            )
            .order_by(GroupMember.student_id)
        )
        return list(result.scalars().all())

    async def _available_student_ids(self, assignment_id: str, class_section_id: str) -> list[str]:
        grouped = select(GroupMember.student_id).where(GroupMember.assignment_id == assignment_id)
        result = await self.db.execute(
            select(Enrollment.student_id)
            .where(
                Enrollment.class_section_id == class_section_id,
                Enrollment.status == ENROLLMENT_ACTIVE,
                Enrollment.student_id.not_in(grouped),
            )
            .order_by(Enrollment.enrolled_at, Enrollment.student_id)
        )
        return list(result.scalars().all())

    async def _group_response(self, group_id: str, assignment_id: str, name: str) -> GroupResponse:
        result = await self.db.execute(
            select(GroupMember.student_id)
            .where(GroupMember.group_id == group_id)
            .order_by(GroupMember.joined_at, GroupMember.student_id)
        )
        return GroupResponse(
            id=group_id,
            assignment_id=assignment_id,
            name=name,
            members=list(result.scalars().all()),
        )
