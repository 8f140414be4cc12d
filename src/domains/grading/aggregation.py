# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Weighted average of a student's component grades.

This is the only averaging routine in the codebase. The instructor grading
view and the student grade view both call compute_average so the two can
never disagree for the same data.

Weights are renormalized over the components that actually carry a score:

    average = sum(score_i * weight_i) / sum(weight_i)

A component with a zero, negative or missing weight is ignored entirely,
and an ungraded component (score None) does not count against the
student. When nothing contributes the result is None, which is distinct
from a legitimate average of 0.

Example:
    >>> components = [{"id": "a", "weight": 30}, {"id": "b", "weight": 40}]
    >>> rows = [{"component_id": "a", "score": 80}, {"component_id": "b", "score": 90}]
    >>> compute_average(rows, components)
    85.7
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from src.domains.grading.validator import parse_number


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def round_score(value: float, decimals: int = 1) -> float:
    """Round half away from zero to a fixed number of decimals."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def compute_average(
    grade_rows: Iterable[Any],
    components: Iterable[Any],
    decimals: int = 1,
) -> float | None:
    """Compute the weighted average for one student.

    Args:
        grade_rows: The student's grade rows. Each exposes ``component_id``
            and ``score`` as attributes or mapping keys.
        components: Grading component records exposing ``id`` and
            ``weight``.
        decimals: Number of decimal places in the result.

    Returns:
        The rounded average, or None if no component contributes.
    """
    weights: dict[Any, float] = {}
    for component in components:
        weight = parse_number(_field(component, "weight"))
        if weight is not None and 0 < weight < math.inf:
            weights[_field(component, "id")] = weight

    weighted_total = 0.0
    weight_used = 0.0
    for row in grade_rows:
        weight = weights.get(_field(row, "component_id"))
        if weight is None:
            continue
        value = parse_number(_field(row, "score"))
        if value is None or not math.isfinite(value):
            continue
        weighted_total += value * weight / 100
        weight_used += weight

    if weight_used == 0:
        return None

    return round_score(weighted_total / weight_used * 100, decimals)
