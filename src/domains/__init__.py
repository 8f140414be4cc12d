# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for CourseGrade.

This package contains domain services that encapsulate business logic.

Domains:
    auth: Token validation for the identity provider's JWTs.
    enrollment: Enrollment guard and enrollment lifecycle.
    grading: Score validation, component resolution, group grade fan-out,
        weighted aggregation and student visibility.
    grouping: Group formation for group-graded assignments.
"""
