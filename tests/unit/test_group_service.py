# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Group service."""

import pytest
from sqlalchemy.exc import IntegrityError

from src.core.exceptions import ErrorCode
from src.domains.grading.exceptions import NotOwnerError, StudentNotEnrolledError
from src.domains.grouping.exceptions import (
    GroupNotFoundError,
    InvalidGroupError,
    NoStudentsAvailableError,
    StudentAlreadyGroupedError,
    StudentNotInGroupError,
)
from src.domains.grouping.service import GroupService, next_group_names, split_balanced
from src.infrastructure.database.models.grading import Group


@pytest.fixture
def group_service(mock_db):
    """Create group service with mock database."""
    return GroupService(db=mock_db)


@pytest.fixture
def sample_group(sample_assignment):
    """A group of the sample assignment."""
    return Group(id="group-1", assignment_id=sample_assignment.id, name="Alpha")


class TestSplitBalanced:
    """Tests for split_balanced."""

    def test_sizes_differ_by_at_most_one(self):
        """Test seven students in groups of three become 3, 2, 2."""
        groups = split_balanced([f"s{i}" for i in range(7)], 3)

        assert [len(group) for group in groups] == [3, 2, 2]
        assert sorted(s for group in groups for s in group) == [f"s{i}" for i in range(7)]

    def test_exact_fit(self):
        """Test an exact multiple fills every group."""
        assert split_balanced(["a", "b", "c", "d"], 2) == [["a", "c"], ["b", "d"]]

    def test_group_size_one(self):
        """Test a size of one puts every student alone."""
        assert split_balanced(["a", "b"], 1) == [["a"], ["b"]]

    def test_empty(self):
        """Test no students make no groups."""
        assert split_balanced([], 4) == []


class TestNextGroupNames:
    """Tests for next_group_names."""

    def test_skips_used_letters(self):
        """Test names already taken are skipped."""
        assert next_group_names({"Group A", "Group C"}, 3) == ["Group B", "Group D", "Group E"]

    def test_continues_past_z(self):
        """Test numbering continues once the alphabet is used up."""
        used = {f"Group {chr(ord('A') + i)}" for i in range(26)}

        assert next_group_names(used, 2) == ["Group 27", "Group 28"]


class TestCreateGroup:
    """Tests for create_group."""

    @pytest.mark.asyncio
    async def test_create_group_success(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test a group and its memberships are written in one commit."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s1", "s2"]),
            result_factory(scalars=[]),
        ]

        result = await group_service.create_group(sample_assignment.id, " Alpha ", ["s1", "s2"], instructor_id)

        assert result.name == "Alpha"
        assert result.members == ["s1", "s2"]
        assert result.assignment_id == sample_assignment.id
        mock_db.add.assert_called_once()
        members = mock_db.add_all.call_args.args[0]
        assert [m.student_id for m in members] == ["s1", "s2"]
        assert {m.group_id for m in members} == {result.id}
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_member_not_enrolled(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test every member must hold a seat in the section."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s1"]),
        ]

        with pytest.raises(StudentNotEnrolledError) as exc_info:
            await group_service.create_group(sample_assignment.id, "Alpha", ["s1", "s2"], instructor_id)

        assert exc_info.value.details == {"student_id": "s2"}
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_member_already_grouped(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test a student already in a group of the assignment is refused."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s1", "s2"]),
            result_factory(scalars=["s2"]),
        ]

        with pytest.raises(StudentAlreadyGroupedError) as exc_info:
            await group_service.create_group(sample_assignment.id, "Alpha", ["s1", "s2"], instructor_id)

        assert exc_info.value.student_ids == ["s2"]
        assert exc_info.value.code == ErrorCode.STUDENT_ALREADY_GROUPED
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_grouping_translated(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test a unique constraint violation at commit becomes a conflict."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s1", "s2"]),
            result_factory(scalars=[]),
            result_factory(scalars=["s1"]),
        ]
        mock_db.commit.side_effect = IntegrityError(
            "INSERT", {}, Exception("uq_group_members_assignment_student")
        )

        with pytest.raises(StudentAlreadyGroupedError) as exc_info:
            await group_service.create_group(sample_assignment.id, "Alpha", ["s1", "s2"], instructor_id)

        assert exc_info.value.student_ids == ["s1"]
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,members,field",
        [
            ("", ["s1"], "name"),
            ("   ", ["s1"], "name"),
            ("Alpha", [], "members"),
            ("Alpha", ["s1", "s1"], "members"),
            ("Alpha", ["s1", " "], "members"),
        ],
    )
    async def test_malformed_request(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id, name, members, field
    ):
        """Test malformed names and member lists are rejected before any write."""
        mock_db.execute.return_value = result_factory(scalar=sample_assignment)

        with pytest.raises(InvalidGroupError) as exc_info:
            await group_service.create_group(sample_assignment.id, name, members, instructor_id)

        assert exc_info.value.field == field
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_owner(self, group_service, mock_db, result_factory, sample_assignment):
        """Test only the owning instructor may form groups."""
        mock_db.execute.return_value = result_factory(scalar=sample_assignment)

        with pytest.raises(NotOwnerError):
            await group_service.create_group(sample_assignment.id, "Alpha", ["s1"], "someone-else")


class TestCreateGroupsAutomatically:
    """Tests for create_groups_automatically."""

    @pytest.mark.asyncio
    async def test_balanced_groups_named_after_existing(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test five students in groups of two become three groups B, C and D."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s1", "s2", "s3", "s4", "s5"]),
            result_factory(scalars=["Group A"]),
        ]

        result = await group_service.create_groups_automatically(
            sample_assignment.id, 2, instructor_id, shuffle=False
        )

        assert result.total_groups == 3
        assert [g.name for g in result.groups] == ["Group B", "Group C", "Group D"]
        assert [g.members for g in result.groups] == [["s1", "s4"], ["s2", "s5"], ["s3"]]
        assert mock_db.add.call_count == 3
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("group_size", [0, 21, -1, "3", True, None])
    async def test_invalid_group_size(self, group_service, mock_db, instructor_id, group_size):
        """Test the group size must be an integer between 1 and 20."""
        with pytest.raises(InvalidGroupError) as exc_info:
            await group_service.create_groups_automatically("assignment-1", group_size, instructor_id)

        assert exc_info.value.field == "group_size"
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_students_available(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test an assignment whose students are all grouped is refused."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=[]),
        ]

        with pytest.raises(NoStudentsAvailableError):
            await group_service.create_groups_automatically(sample_assignment.id, 3, instructor_id)

        mock_db.commit.assert_not_called()


class TestMembers:
    """Tests for member changes and group deletion."""

    @pytest.mark.asyncio
    async def test_add_member(
        self, group_service, mock_db, result_factory, sample_assignment, sample_group, instructor_id
    ):
        """Test an enrolled ungrouped student joins the group."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_group),
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s3"]),
            result_factory(scalars=[]),
            result_factory(scalars=["s1", "s3"]),
        ]

        result = await group_service.add_member(sample_group.id, "s3", instructor_id)

        assert result.members == ["s1", "s3"]
        added = mock_db.add.call_args.args[0]
        assert added.student_id == "s3"
        assert added.assignment_id == sample_assignment.id
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_add_member_group_not_found(self, group_service, mock_db, result_factory, instructor_id):
        """Test adding to an unknown group."""
        mock_db.execute.return_value = result_factory(scalar=None)

        with pytest.raises(GroupNotFoundError):
            await group_service.add_member("missing", "s3", instructor_id)

    @pytest.mark.asyncio
    async def test_remove_member(
        self, group_service, mock_db, result_factory, sample_assignment, sample_group, instructor_id
    ):
        """Test a member is removed."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_group),
            result_factory(scalar=sample_assignment),
            result_factory(scalar="member-2"),
            result_factory(),
            result_factory(scalars=["s1"]),
        ]

        result = await group_service.remove_member(sample_group.id, "s2", instructor_id)

        assert result.members == ["s1"]
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remove_non_member(
        self, group_service, mock_db, result_factory, sample_assignment, sample_group, instructor_id
    ):
        """Test removing a student outside the group."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_group),
            result_factory(scalar=sample_assignment),
            result_factory(scalar=None),
        ]

        with pytest.raises(StudentNotInGroupError):
            await group_service.remove_member(sample_group.id, "s9", instructor_id)

        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_group(
        self, group_service, mock_db, result_factory, sample_assignment, sample_group, instructor_id
    ):
        """Test memberships and the group are deleted in one commit."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_group),
            result_factory(scalar=sample_assignment),
            result_factory(),
            result_factory(),
        ]

        result = await group_service.delete_group(sample_group.id, instructor_id)

        assert result.ok is True
        assert result.group_id == sample_group.id
        assert mock_db.execute.await_count == 4
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_group_not_owner(
        self, group_service, mock_db, result_factory, sample_assignment, sample_group
    ):
        """Test only the owning instructor may delete a group."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_group),
            result_factory(scalar=sample_assignment),
        ]

        with pytest.raises(NotOwnerError):
            await group_service.delete_group(sample_group.id, "someone-else")


class TestListAvailableStudents:
    """Tests for list_available_students."""

    @pytest.mark.asyncio
    async def test_lists_ungrouped_students(
        self, group_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test the ungrouped students of the section are listed."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalars=["s3", "s4"]),
        ]

        result = await group_service.list_available_students(sample_assignment.id, instructor_id)

        assert result.student_ids == ["s3", "s4"]
        assert result.total == 2
