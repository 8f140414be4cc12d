# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EnrollRequest(BaseModel):
    """Request to enroll a student in a class section."""

    student_id: str = Field(min_length=1, max_length=36, description="Student identifier")


class EnrollmentResponse(BaseModel):
    """A single enrollment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    class_section_id: str
    course_id: str
    student_id: str
    status: str
    enrolled_at: datetime | None = None
    withdrawn_at: datetime | None = None


class EnrollmentListResponse(BaseModel):
    """Roster of a class section."""

    class_section_id: str
    class_section_name: str
    items: list[EnrollmentResponse]
    total: int


class CourseEnrollmentSummary(BaseModel):
    """A student holding an active seat in another section of the course."""

    enrollment_id: str
    student_id: str
    class_section_id: str
    class_section_name: str


class CourseEnrollmentListResponse(BaseModel):
    """Active enrollments in the other sections of a course."""

    course_id: str
    items: list[CourseEnrollmentSummary]
    total: int


class WithdrawResponse(BaseModel):
    """Result of a withdrawal."""

    ok: bool = True
    enrollment: EnrollmentResponse
