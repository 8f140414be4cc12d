# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Provides an engine with the schema created from the ORM metadata, a
session, and a seeded course with two class sections. The tests run on a
SQLite file through aiosqlite unless TEST_DATABASE_URL points them at
PostgreSQL.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.domains.enrollment.service import EnrollmentService
from src.infrastructure.database.models import (
    Assignment,
    Base,
    ClassSection,
    Course,
    Group,
    GroupMember,
)

INSTRUCTOR_ID = "7c0f6a52-0000-4000-8000-0000000000aa"


@pytest.fixture(scope="session")
def db_url(tmp_path_factory) -> str:
    """Get database URL for tests."""
    path = tmp_path_factory.mktemp("db") / "coursegrade_test.db"
    return os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{path}")


def _use_sqlite_transactions(engine) -> None:
    """Let the SQLite driver honour BEGIN and SAVEPOINT as issued by SQLAlchemy."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture(scope="function")
async def db_engine(db_url: str):
    """Create async engine with a fresh schema."""
    engine = create_async_engine(db_url, echo=False)
    if engine.dialect.name == "sqlite":
        _use_sqlite_transactions(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for database tests."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def seeded(db_session: AsyncSession) -> dict:
    """Seed one course with two sections, an assignment and a group."""
    course = Course(code="IF2110", title="Data Structures", credits=3)
    db_session.add(course)
    await db_session.flush()

    section_a = ClassSection(course_id=course.id, instructor_id=INSTRUCTOR_ID, name="IF2110-A", capacity=2)
    section_b = ClassSection(course_id=course.id, instructor_id=INSTRUCTOR_ID, name="IF2110-B", capacity=40)
    db_session.add_all([section_a, section_b])
    await db_session.flush()

    assignment = Assignment(
        course_id=course.id,
        class_section_id=section_a.id,
        instructor_id=INSTRUCTOR_ID,
        title="Group Project",
        components=[
            {"name": "Proposal", "weight": 30},
            {"nama": "Laporan Akhir", "bobot": 40},
        ],
        grades_visible=False,
    )
    db_session.add(assignment)
    await db_session.flush()

    group = Group(assignment_id=assignment.id, name="Alpha")
    db_session.add(group)
    await db_session.flush()

    members = ["student-1", "student-2"]
    db_session.add_all(
        [GroupMember(group_id=group.id, assignment_id=assignment.id, student_id=s) for s in members]
    )
    await db_session.commit()

    return {
        "course": course,
        "section_a": section_a,
        "section_b": section_b,
        "assignment": assignment,
        "group": group,
        "members": members,
        "instructor_id": INSTRUCTOR_ID,
        # Plain ids stay readable after a rollback expires the objects above
        "course_id": course.id,
        "section_a_id": section_a.id,
        "section_b_id": section_b.id,
        "assignment_id": assignment.id,
    }


@pytest_asyncio.fixture(scope="function")
async def enrolled_members(db_session: AsyncSession, seeded: dict) -> list[str]:
    """Members of the seeded group hold seats in section A."""
    service = EnrollmentService(db_session)
    for student_id in seeded["members"]:
        await service.enroll(student_id, seeded["section_a"].id)
    return seeded["members"]
