# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

Users authenticate against the external identity provider, which issues
bearer JWTs. This package validates those tokens and exposes the acting
principal to the API layer.

Exports:
    JWTManager: JWT token creation and validation.
"""

from src.domains.auth.jwt import InvalidTokenError, JWTManager, TokenExpiredError, TokenPayload

__all__ = [
    "JWTManager",
    "TokenPayload",
    "TokenExpiredError",
    "InvalidTokenError",
]
