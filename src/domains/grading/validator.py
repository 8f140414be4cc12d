# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score validation.

Scores arrive from forms and JSON bodies as numbers or strings. Parsing is
permissive: a string is read up to the end of its leading numeric prefix,
so "85", " 85.5" and "85 pts" are all accepted. None means "not graded"
and is always valid.

Example:
    >>> validate_score("85.5")
    ScoreValidation(valid=True, value=85.5, reason=None, message=None)
    >>> validate_score(101).reason
    <ErrorCode.ABOVE_MAXIMUM: 'AboveMaximum'>
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.core.exceptions import ErrorCode
from src.domains.grading.exceptions import ScoreValidationError

DEFAULT_MIN_SCORE = 0.0
DEFAULT_MAX_SCORE = 100.0

_NUMERIC_PREFIX = re.compile(
    r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


@dataclass(frozen=True)
class ScoreValidation:
    """Outcome of validating one raw score.

    Attributes:
        valid: Whether the score may be stored.
        value: Parsed score, None when not graded or invalid.
        reason: Reason code when invalid.
        message: Human-readable explanation when invalid.
    """

    valid: bool
    value: float | None = None
    reason: ErrorCode | None = None
    message: str | None = None

    def raise_for_reason(self) -> None:
        """Raise ScoreValidationError if the score was rejected."""
        if not self.valid and self.reason is not None:
            raise ScoreValidationError(self.reason, self.message or "Invalid score")


def parse_number(raw: Any) -> float | None:
    """Parse a raw value into a float.

    Args:
        raw: Number or string from the caller.

    Returns:
        The parsed float, or None if no number can be read.
    """
    if isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
        return None if math.isnan(value) else value

    if isinstance(raw, str):
        match = _NUMERIC_PREFIX.match(raw.lstrip())
        if match is None:
            return None
        return float(match.group(0).replace("Infinity", "inf"))

    return None


def validate_score(
    raw: Any,
    min_score: float = DEFAULT_MIN_SCORE,
    max_score: float = DEFAULT_MAX_SCORE,
) -> ScoreValidation:
    """Validate a submitted score against the configured bounds.

    Both bounds are inclusive.

    Args:
        raw: Submitted score. None means "not yet graded".
        min_score: Lowest accepted score.
        max_score: Highest accepted score.

    Returns:
        ScoreValidation describing the outcome.
    """
    if raw is None:
        return ScoreValidation(valid=True)

    value = parse_number(raw)
    if value is None:
        return ScoreValidation(
            valid=False,
            reason=ErrorCode.NOT_A_NUMBER,
            message="Score must be a number",
        )

    if value < min_score:
        return ScoreValidation(
            valid=False,
            reason=ErrorCode.BELOW_MINIMUM,
            message=f"Score must not be below {min_score:g}",
        )

    if value > max_score:
        return ScoreValidation(
            valid=False,
            reason=ErrorCode.ABOVE_MAXIMUM,
            message=f"Score must not exceed {max_score:g}",
        )

    return ScoreValidation(valid=True, value=value)


def ensure_valid_score(
    raw: Any,
    min_score: float = DEFAULT_MIN_SCORE,
    max_score: float = DEFAULT_MAX_SCORE,
) -> float | None:
    """Validate a score and return its parsed value.

    Raises:
        ScoreValidationError: If the score is rejected.
    """
    result = validate_score(raw, min_score, max_score)
    result.raise_for_reason()
    return result.value
