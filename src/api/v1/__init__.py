# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    grading: Assignment grading and student grade views.
    enrollments: Class section enrollment and withdrawal.
    groups: Group formation for assignments.
"""

from fastapi import APIRouter

from src.api.v1 import enrollments, grading, groups

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(grading.router, prefix="/assignments", tags=["Grading"])
router.include_router(enrollments.router, tags=["Enrollments"])
router.include_router(groups.router, tags=["Groups"])
