"""CourseGrade Backend.

Enrollment consistency and weighted grading core for university courses:
one active class section per course per student, group-based component
grading, and instructor-gated publication of weighted averages.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
