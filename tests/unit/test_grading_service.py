# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Grading service."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from src.core.config.settings import GradingSettings
from src.core.exceptions import ErrorCode, StorageError
from src.domains.grading.exceptions import (
    AssignmentNotFoundError,
    NotEnrolledError,
    NotOwnerError,
)
from src.domains.grading.service import GradingService
from src.domains.grading.visibility import can_view_grades
from src.infrastructure.database.models.grading import Grade, Group, GroupMember


@pytest.fixture
def grading_settings():
    """Grading settings with default bounds."""
    return GradingSettings(
        min_score=0,
        max_score=100,
        average_decimals=1,
        hidden_grades_message="Grades have not been published by the instructor yet",
    )


@pytest.fixture
def grading_service(mock_db, grading_settings):
    """Create grading service with mock database."""
    return GradingService(db=mock_db, settings=grading_settings)


@pytest.fixture
def graded_rows(component_records):
    """Grades of two students in one group."""
    proposal, report = component_records
    return [
        Grade(id="g1", component_id=proposal.id, student_id="student-1", score=80.0, feedback="ok"),
        Grade(id="g2", component_id=report.id, student_id="student-1", score=90.0, feedback="good"),
        Grade(id="g3", component_id=proposal.id, student_id="student-2", score=70.0, feedback=""),
    ]


class TestSaveGroupGrade:
    """Tests for save_group_grade."""

    @pytest.mark.asyncio
    async def test_commits_once(
        self, grading_service, mock_db, result_factory, sample_assignment, component_records, instructor_id
    ):
        """Test the whole fan-out is committed in one transaction."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar=component_records[0]),
            result_factory(scalars=["student-1", "student-2"]),
            result_factory(scalar=None),
            result_factory(scalar=None),
        ]

        result = await grading_service.save_group_grade(
            sample_assignment.id, "group-1", 0, 85, "Nice", instructor_id
        )

        assert result.saved_count == 2
        assert len(result.saved_grade_ids) == 2
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_storage_failure_rolls_back(
        self, grading_service, mock_db, result_factory, sample_assignment, component_records, instructor_id
    ):
        """Test a failed commit surfaces as StorageError."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar=component_records[0]),
            result_factory(scalars=["student-1"]),
            result_factory(scalar=None),
        ]
        mock_db.commit.side_effect = OperationalError("COMMIT", {}, Exception("connection lost"))

        with pytest.raises(StorageError) as exc_info:
            await grading_service.save_group_grade(
                sample_assignment.id, "group-1", 0, 85, "", instructor_id
            )

        assert exc_info.value.code == ErrorCode.STORAGE_FAILURE
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_assignment_not_found(self, grading_service, mock_db, result_factory, instructor_id):
        """Test an unknown assignment."""
        mock_db.execute.return_value = result_factory(scalar=None)

        with pytest.raises(AssignmentNotFoundError):
            await grading_service.save_group_grade("missing", "group-1", 0, 85, "", instructor_id)

        mock_db.commit.assert_not_called()


class TestSaveStudentGrade:
    """Tests for save_student_grade."""

    @pytest.mark.asyncio
    async def test_saves_single_student(
        self, grading_service, mock_db, result_factory, sample_assignment, component_records, instructor_id
    ):
        """Test a single grade row is written and committed."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar="enrollment-1"),
            result_factory(scalar=component_records[0]),
            result_factory(scalar=None),
        ]

        result = await grading_service.save_student_grade(
            sample_assignment.id, "student-1", 0, "92.5", "Great", instructor_id
        )

        assert result.grade_id
        mock_db.commit.assert_awaited_once()


class TestGetGradingView:
    """Tests for get_grading_view."""

    @pytest.mark.asyncio
    async def test_builds_view_with_averages(
        self,
        grading_service,
        mock_db,
        result_factory,
        sample_assignment,
        component_records,
        graded_rows,
        instructor_id,
    ):
        """Test header, components, groups, grades and averages."""
        group = Group(id="group-1", assignment_id=sample_assignment.id, name="Alpha")
        members = [
            GroupMember(group_id="group-1", assignment_id=sample_assignment.id, student_id="student-1"),
            GroupMember(group_id="group-1", assignment_id=sample_assignment.id, student_id="student-2"),
            GroupMember(group_id="group-1", assignment_id=sample_assignment.id, student_id="student-3"),
        ]
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(first=SimpleNamespace(name="IF2110-A", code="IF2110", title="Data Structures")),
            result_factory(scalars=component_records),
            result_factory(scalars=[group]),
            result_factory(scalars=members),
            result_factory(scalars=graded_rows),
        ]

        view = await grading_service.get_grading_view(sample_assignment.id, instructor_id)

        assert view.assignment.course_code == "IF2110"
        assert view.assignment.class_section_name == "IF2110-A"
        assert [c.name for c in view.components] == ["Proposal", "Final Report"]
        assert [c.component_id for c in view.components] == ["component-proposal", "component-report"]
        assert view.groups[0].member_count == 3
        assert {g.component_name for g in view.grades} == {"Proposal", "Final Report"}
        assert all(g.group_id == "group-1" for g in view.grades)
        assert view.averages == {"student-1": 85.7, "student-2": 70.0, "student-3": None}

    @pytest.mark.asyncio
    async def test_ungraded_components_have_no_record(
        self, grading_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test declared components show before any record exists."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(first=None),
            result_factory(scalars=[]),
            result_factory(scalars=[]),
            result_factory(scalars=[]),
            result_factory(scalars=[]),
        ]

        view = await grading_service.get_grading_view(sample_assignment.id, instructor_id)

        assert len(view.components) == 2
        assert all(c.component_id is None for c in view.components)
        assert view.assignment.course_code is None
        assert view.averages == {}

    @pytest.mark.asyncio
    async def test_not_owner(self, grading_service, mock_db, result_factory, sample_assignment):
        """Test another instructor cannot open the view."""
        mock_db.execute.return_value = result_factory(scalar=sample_assignment)

        with pytest.raises(NotOwnerError):
            await grading_service.get_grading_view(sample_assignment.id, "intruder")


class TestSetGradesVisible:
    """Tests for set_grades_visible."""

    @pytest.mark.asyncio
    async def test_publish(self, grading_service, mock_db, result_factory, sample_assignment, instructor_id):
        """Test publishing flips the flag and commits."""
        mock_db.execute.return_value = result_factory(scalar=sample_assignment)

        result = await grading_service.set_grades_visible(sample_assignment.id, instructor_id, True)

        assert result.ok is True
        assert result.grades_visible is True
        assert sample_assignment.grades_visible is True
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hide_is_idempotent(
        self, grading_service, mock_db, result_factory, sample_assignment, instructor_id
    ):
        """Test hiding already hidden grades succeeds."""
        mock_db.execute.return_value = result_factory(scalar=sample_assignment)

        result = await grading_service.set_grades_visible(sample_assignment.id, instructor_id, False)

        assert result.grades_visible is False

    @pytest.mark.asyncio
    async def test_not_owner(self, grading_service, mock_db, result_factory, sample_assignment):
        """Test another instructor cannot publish."""
        mock_db.execute.return_value = result_factory(scalar=sample_assignment)

        with pytest.raises(NotOwnerError):
            await grading_service.set_grades_visible(sample_assignment.id, "intruder", True)

        assert sample_assignment.grades_visible is False
        mock_db.commit.assert_not_called()


class TestGetStudentGrades:
    """Tests for get_student_grades."""

    @pytest.mark.asyncio
    async def test_hidden_until_published(self, grading_service, mock_db, result_factory, sample_assignment):
        """Test unpublished grades return only the message."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar="enrollment-1"),
        ]

        result = await grading_service.get_student_grades(sample_assignment.id, "student-1")

        assert result.visible is False
        assert result.message == "Grades have not been published by the instructor yet"
        assert result.data is None
        assert mock_db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_published_grades(
        self, grading_service, mock_db, result_factory, sample_assignment, component_records, graded_rows
    ):
        """Test published grades include components, rows, average and group."""
        sample_assignment.grades_visible = True
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar="enrollment-1"),
            result_factory(scalars=component_records),
            result_factory(scalars=graded_rows[:2]),
            result_factory(first=SimpleNamespace(id="group-1", name="Alpha")),
        ]

        result = await grading_service.get_student_grades(sample_assignment.id, "student-1")

        assert result.visible is True
        assert result.data.average == 85.7
        assert [g.score for g in result.data.grades] == [80.0, 90.0]
        assert result.data.group.name == "Alpha"
        assert len(result.data.components) == 2

    @pytest.mark.asyncio
    async def test_published_without_grades(
        self, grading_service, mock_db, result_factory, sample_assignment, component_records
    ):
        """Test a published assignment with no grade rows has no average."""
        sample_assignment.grades_visible = True
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar="enrollment-1"),
            result_factory(scalars=component_records),
            result_factory(scalars=[]),
            result_factory(first=None),
        ]

        result = await grading_service.get_student_grades(sample_assignment.id, "student-1")

        assert result.visible is True
        assert result.data.average is None
        assert result.data.group is None

    @pytest.mark.asyncio
    async def test_not_enrolled_even_when_published(
        self, grading_service, mock_db, result_factory, sample_assignment
    ):
        """Test an outsider is refused regardless of visibility."""
        sample_assignment.grades_visible = True
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar=None),
        ]

        with pytest.raises(NotEnrolledError):
            await grading_service.get_student_grades(sample_assignment.id, "stranger")

    @pytest.mark.asyncio
    async def test_visibility_decided_by_gate(self, grading_service, mock_db, result_factory, sample_assignment):
        """Test the student read asks can_view_grades with the enrollment state."""
        mock_db.execute.side_effect = [
            result_factory(scalar=sample_assignment),
            result_factory(scalar="enrollment-1"),
        ]

        with patch("src.domains.grading.service.can_view_grades", wraps=can_view_grades) as gate:
            result = await grading_service.get_student_grades(sample_assignment.id, "student-1")

        gate.assert_called_once_with(sample_assignment, True)
        assert result.visible is False
        assert result.data is None
        assert mock_db.execute.await_count == 2
