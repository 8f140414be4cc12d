# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Group formation request and response models."""

from pydantic import BaseModel, Field


class CreateGroupRequest(BaseModel):
    """Request to create a group with an explicit member list."""

    name: str = Field(description="Group display name")
    members: list[str] = Field(default_factory=list, description="Student identifiers")


class AutoGroupRequest(BaseModel):
    """Request to split the ungrouped students into balanced groups."""

    group_size: int = Field(description="Largest allowed group size, 1 to 20")


class GroupMemberRequest(BaseModel):
    """Request to add a student to a group."""

    student_id: str = Field(min_length=1, max_length=36, description="Student identifier")


class GroupResponse(BaseModel):
    """A group and its members."""

    id: str
    assignment_id: str
    name: str
    members: list[str]


class AutoGroupResponse(BaseModel):
    """Groups created by automatic grouping."""

    groups: list[GroupResponse]
    total_groups: int


class AvailableStudentsResponse(BaseModel):
    """Students of the section who are not yet in a group."""

    assignment_id: str
    student_ids: list[str]
    total: int


class DeleteGroupResponse(BaseModel):
    """Result of a group deletion."""

    ok: bool = True
    group_id: str
