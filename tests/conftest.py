# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests with a mocked AsyncSession
- Integration tests against the API and PostgreSQL
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.infrastructure.database.models.academic import ClassSection, Course, Enrollment
from src.infrastructure.database.models.grading import Assignment, GradingComponent


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Database Session Mocks
# =============================================================================


def make_result(
    scalar: Any = None,
    scalars: list[Any] | None = None,
    first: Any = None,
    rows: list[Any] | None = None,
    scalar_one: Any = None,
) -> MagicMock:
    """Build a mock of a SQLAlchemy Result.

    Args:
        scalar: Value for scalar_one_or_none().
        scalars: Values for scalars().all().
        first: Value for first().
        rows: Values for all().
        scalar_one: Value for scalar_one().

    Returns:
        MagicMock standing in for the execute() result.
    """
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar_one
    result.scalars.return_value.all.return_value = scalars or []
    result.first.return_value = first
    result.all.return_value = rows or []
    return result


def _savepoint() -> MagicMock:
    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    return savepoint


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.begin_nested = MagicMock(side_effect=lambda: _savepoint())
    return db


@pytest.fixture
def result_factory() -> Callable[..., MagicMock]:
    """Provide make_result to tests."""
    return make_result


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def instructor_id() -> str:
    """Provide the owning instructor ID."""
    return "7c0f6a52-0000-4000-8000-000000000001"


@pytest.fixture
def student_id() -> str:
    """Provide a sample student ID."""
    return "7c0f6a52-0000-4000-8000-000000000002"


@pytest.fixture
def sample_course() -> Course:
    """Create a sample course."""
    return Course(id="course-1", code="IF2110", title="Data Structures", credits=3)


@pytest.fixture
def sample_section(sample_course: Course) -> ClassSection:
    """Create a sample class section with room for 40 students."""
    return ClassSection(
        id="section-a",
        course_id=sample_course.id,
        instructor_id="7c0f6a52-0000-4000-8000-000000000001",
        name="IF2110-A",
        capacity=40,
    )


@pytest.fixture
def sample_components() -> list[dict[str, Any]]:
    """Declared components in the current field spelling."""
    return [
        {"name": "Proposal", "weight": 30, "description": "Project proposal"},
        {"name": "Final Report", "weight": 40, "description": "Written report"},
    ]


@pytest.fixture
def sample_assignment(instructor_id: str, sample_section: ClassSection, sample_components) -> Assignment:
    """Create a sample assignment owned by instructor_id."""
    return Assignment(
        id="assignment-1",
        course_id=sample_section.course_id,
        class_section_id=sample_section.id,
        instructor_id=instructor_id,
        title="Group Project",
        components=sample_components,
        grades_visible=False,
    )


@pytest.fixture
def component_records(sample_assignment: Assignment) -> list[GradingComponent]:
    """Persisted records for the sample components."""
    return [
        GradingComponent(
            id="component-proposal",
            assignment_id=sample_assignment.id,
            name="Proposal",
            weight=30.0,
            description="Project proposal",
        ),
        GradingComponent(
            id="component-report",
            assignment_id=sample_assignment.id,
            name="Final Report",
            weight=40.0,
            description="Written report",
        ),
    ]


@pytest.fixture
def active_enrollment(student_id: str, sample_section: ClassSection) -> Enrollment:
    """Create an active enrollment in the sample section."""
    return Enrollment(
        id="enrollment-1",
        class_section_id=sample_section.id,
        course_id=sample_section.course_id,
        student_id=student_id,
        status="active",
    )
