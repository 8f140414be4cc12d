# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for PostgreSQL connections.

This package provides SQLAlchemy async connections and the ORM models for
courses, class sections, enrollments, assignments, groups and grades.

Example:
    from src.infrastructure.database import init_database, get_session

    await init_database(settings)
    async with get_session() as session:
        result = await session.execute(select(Assignment))
"""

from src.infrastructure.database.connection import (
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)

__all__ = [
    "check_database_connection",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
]
