# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grouping domain package.

This package forms the groups that assignments are graded by:
- Manual and automatic balanced group creation
- Member changes and group deletion
- Students of the section still available for grouping
"""

from src.domains.grouping.exceptions import (
    GroupNotFoundError,
    InvalidGroupError,
    NoStudentsAvailableError,
    StudentAlreadyGroupedError,
    StudentNotInGroupError,
)
from src.domains.grouping.service import GroupService, next_group_names, split_balanced

__all__ = [
    "GroupService",
    "next_group_names",
    "split_balanced",
    "GroupNotFoundError",
    "InvalidGroupError",
    "NoStudentsAvailableError",
    "StudentAlreadyGroupedError",
    "StudentNotInGroupError",
]
