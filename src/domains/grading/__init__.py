# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading domain package.

This package turns per-component, per-group scores into published grades:
- validator: score parsing and bounds
- components: declared component list and its persisted records
- writer: group and single-student grade writes
- aggregation: the weighted average
- visibility: the student-facing gate
- service: operations called by the API layer
"""

from src.domains.grading.aggregation import compute_average
from src.domains.grading.components import ComponentResolver, DeclaredComponent, parse_components
from src.domains.grading.exceptions import (
    AssignmentNotFoundError,
    ComponentIndexOutOfRangeError,
    GroupNotFoundOrEmptyError,
    NotEnrolledError,
    NotOwnerError,
    ScoreValidationError,
    StudentNotEnrolledError,
)
from src.domains.grading.service import GradingService
from src.domains.grading.validator import ScoreValidation, validate_score
from src.domains.grading.visibility import can_view_grades, format_for_student
from src.domains.grading.writer import GroupGradeWriter

__all__ = [
    "GradingService",
    "ComponentResolver",
    "GroupGradeWriter",
    "DeclaredComponent",
    "ScoreValidation",
    "compute_average",
    "parse_components",
    "validate_score",
    "can_view_grades",
    "format_for_student",
    "AssignmentNotFoundError",
    "ComponentIndexOutOfRangeError",
    "GroupNotFoundOrEmptyError",
    "NotEnrolledError",
    "NotOwnerError",
    "ScoreValidationError",
    "StudentNotEnrolledError",
]
