# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading request and response models."""

from typing import Any

from pydantic import BaseModel, Field


class SaveGroupGradeRequest(BaseModel):
    """Score every member of a group on one component.

    The score is kept as submitted and validated by the grading domain,
    so strings such as "85" are accepted.
    """

    group_id: str = Field(min_length=1, description="Group identifier")
    component_index: int = Field(description="Zero-based index into the declared components")
    score: Any = Field(default=None, description="Score in [0, 100]; null means ungraded")
    feedback: str | None = Field(default=None, description="Free-text feedback")


class SaveGroupGradeResponse(BaseModel):
    """Rows written by a group grade."""

    saved_grade_ids: list[str]
    saved_count: int


class SaveStudentGradeRequest(BaseModel):
    """Score one student on one component."""

    student_id: str = Field(min_length=1, description="Student identifier")
    component_index: int = Field(description="Zero-based index into the declared components")
    score: Any = Field(default=None, description="Score in [0, 100]; null means ungraded")
    feedback: str | None = Field(default=None, description="Free-text feedback")


class SaveStudentGradeResponse(BaseModel):
    """Row written by a single-student grade."""

    grade_id: str


class VisibilityRequest(BaseModel):
    """Publish or hide an assignment's grades."""

    visible: bool


class VisibilityResponse(BaseModel):
    """Current visibility of an assignment's grades."""

    ok: bool = True
    assignment_id: str
    grades_visible: bool


class ComponentView(BaseModel):
    """A declared component as shown to instructors and students."""

    index: int
    name: str
    weight: float
    description: str = ""
    deadline: str | None = None
    component_id: str | None = Field(default=None, description="Persisted record, once graded")


class GroupView(BaseModel):
    """A group with its members."""

    id: str
    name: str
    member_count: int
    members: list[str]


class GradeView(BaseModel):
    """One student's grade on one component."""

    id: str
    component_id: str
    component_name: str
    student_id: str
    score: float | None = None
    feedback: str = ""
    group_id: str | None = None


class AssignmentHeader(BaseModel):
    """Assignment context for the grading view."""

    id: str
    title: str
    class_section_id: str
    class_section_name: str | None = None
    course_code: str | None = None
    course_title: str | None = None
    grades_visible: bool


class GradingViewResponse(BaseModel):
    """Everything an instructor needs to grade an assignment."""

    assignment: AssignmentHeader
    components: list[ComponentView]
    groups: list[GroupView]
    grades: list[GradeView]
    averages: dict[str, float | None] = Field(
        default_factory=dict,
        description="Provisional weighted average per student",
    )


class StudentGroup(BaseModel):
    """The student's group on the assignment."""

    id: str
    name: str


class StudentGradesData(BaseModel):
    """Published grades for one student."""

    components: list[ComponentView]
    grades: list[GradeView]
    average: float | None = None
    group: StudentGroup | None = None


class StudentGradesResponse(BaseModel):
    """Student grade read, gated by the visibility flag."""

    visible: bool
    message: str | None = None
    data: StudentGradesData | None = None
