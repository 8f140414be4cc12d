# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API integration tests.

The app is built from the v1 router and the CoreError handler. Database
and role dependencies are overridden so handlers run against a mocked
service.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.app import core_error_handler
from src.api.dependencies import (
    get_db,
    require_admin,
    require_auth,
    require_instructor,
    require_student,
)
from src.api.middleware.auth import CurrentUser
from src.api.v1 import router as v1_router
from src.core.exceptions import CoreError
from src.domains.auth.jwt import TokenPayload


def make_user(user_id: str, user_type: str) -> CurrentUser:
    """Build an authenticated principal."""
    return CurrentUser(
        TokenPayload(sub=user_id, type="access", user_type=user_type, exp=0, iat=0, jti="test")
    )


@pytest.fixture
def mock_session() -> AsyncMock:
    """Session handed to route handlers."""
    return AsyncMock()


@pytest.fixture
def app(mock_session):
    """Create test FastAPI app."""
    app = FastAPI()
    app.include_router(v1_router)
    app.add_exception_handler(CoreError, core_error_handler)

    async def override_get_db():
        yield mock_session

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def as_user(app):
    """Authenticate every role dependency as the given principal."""

    def _as_user(user_id: str, user_type: str) -> CurrentUser:
        user = make_user(user_id, user_type)
        app.dependency_overrides[require_auth] = lambda: user
        for dependency, role in (
            (require_admin, "admin"),
            (require_instructor, "instructor"),
            (require_student, "student"),
        ):
            if role == user_type:
                app.dependency_overrides[dependency] = lambda: user
            else:
                app.dependency_overrides.pop(dependency, None)
        return user

    return _as_user


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)
