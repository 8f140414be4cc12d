# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Declared grading components and their persisted records.

An assignment declares its components as a JSON list on the assignment
row. Rows written before the schema was translated use the keys ``nama``,
``bobot`` and ``deskripsi`` instead of ``name``, ``weight`` and
``description``. parse_components is the single place that reads that list
and every consumer works with the normalized DeclaredComponent.

Grades point at GradingComponent rows, which are created the first time a
declared component is graded and reused after that. The unique constraint
on (assignment_id, name) decides races between concurrent first uses.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.grading.exceptions import (
    AssignmentNotFoundError,
    ComponentIndexOutOfRangeError,
)
from src.domains.grading.validator import parse_number
from src.infrastructure.database.models.base import new_id
from src.infrastructure.database.models.grading import Assignment, GradingComponent

logger = logging.getLogger(__name__)

_FIELD_ALIASES = {
    "name": ("name", "nama"),
    "weight": ("weight", "bobot"),
    "description": ("description", "deskripsi"),
    "deadline": ("deadline",),
}


@dataclass(frozen=True)
class DeclaredComponent:
    """One grading component as declared on an assignment."""

    index: int
    name: str
    weight: float
    description: str = ""
    deadline: str | None = None


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    # Empty values fall through to the legacy spelling
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def normalize_component(raw: Mapping[str, Any], index: int) -> DeclaredComponent:
    """Normalize one declared component to the canonical shape.

    Args:
        raw: Component object in either field spelling.
        index: Position of the component in the declared list.

    Returns:
        DeclaredComponent with a non-empty name and a numeric weight.
    """
    name = _first_present(raw, _FIELD_ALIASES["name"])
    weight = parse_number(_first_present(raw, _FIELD_ALIASES["weight"]))
    description = _first_present(raw, _FIELD_ALIASES["description"])
    deadline = _first_present(raw, _FIELD_ALIASES["deadline"])

    return DeclaredComponent(
        index=index,
        name=str(name).strip() if name is not None else f"Component {index + 1}",
        weight=weight if weight is not None else 0.0,
        description=str(description) if description is not None else "",
        deadline=str(deadline) if deadline is not None else None,
    )


def parse_components(raw: Any) -> list[DeclaredComponent]:
    """Read an assignment's declared component list.

    Accepts the decoded JSON list or its string form. Malformed JSON and
    non-list values yield an empty list; entries that are not objects are
    skipped.

    Args:
        raw: Value of Assignment.components.

    Returns:
        Normalized components in declaration order.
    """
    if raw is None:
        return []

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed component list")
            return []

    if not isinstance(raw, list):
        return []

    items = [item for item in raw if isinstance(item, Mapping)]
    return [normalize_component(item, index) for index, item in enumerate(items)]


class ComponentResolver:
    """Resolves declared components to GradingComponent records.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize component resolver.

        Args:
            db: Async database session.
        """
        self.db = db

    async def get_assignment(self, assignment_id: str) -> Assignment:
        """Load an assignment.

        Raises:
            AssignmentNotFoundError: If assignment not found.
        """
        result = await self.db.execute(
            select(Assignment).where(Assignment.id == str(assignment_id))
        )
        assignment = result.scalar_one_or_none()
        if not assignment:
            raise AssignmentNotFoundError(str(assignment_id))
        return assignment

    async def resolve(self, assignment_id: str, index: int) -> GradingComponent:
        """Resolve a component index of an assignment to its record.

        Args:
            assignment_id: Assignment identifier.
            index: Zero-based position in the declared component list.

        Returns:
            The existing or newly created GradingComponent.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            ComponentIndexOutOfRangeError: If index addresses no component.
        """
        assignment = await self.get_assignment(assignment_id)
        return await self.resolve_for(assignment, index)

    async def resolve_for(self, assignment: Assignment, index: int) -> GradingComponent:
        """Resolve a component index of an already loaded assignment.

        Raises:
            ComponentIndexOutOfRangeError: If index addresses no component.
        """
        declared = parse_components(assignment.components)
        if index < 0 or index >= len(declared):
            raise ComponentIndexOutOfRangeError(index, len(declared))

        component = declared[index]
        existing = await self._get_record(assignment.id, component.name)
        if existing:
            return existing

        record = GradingComponent(
            id=new_id(),
            assignment_id=assignment.id,
            name=component.name,
            weight=component.weight,
            description=component.description,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(record)
                await self.db.flush()
        except IntegrityError:
            # Another request created it first
            existing = await self._get_record(assignment.id, component.name)
            if existing is None:
                raise
            logger.debug(
                "Component created concurrently: assignment=%s, name=%s",
                assignment.id,
                component.name,
            )
            return existing

        logger.info(
            "Created grading component: assignment=%s, name=%s, weight=%s",
            assignment.id,
            component.name,
            component.weight,
        )
        return record

    async def list_records(self, assignment_id: str) -> list[GradingComponent]:
        """List the persisted component records of an assignment."""
        result = await self.db.execute(
            select(GradingComponent)
            .where(GradingComponent.assignment_id == str(assignment_id))
            .order_by(GradingComponent.created_at)
        )
        return list(result.scalars().all())

    async def _get_record(self, assignment_id: str, name: str) -> GradingComponent | None:
        result = await self.db.execute(
            select(GradingComponent).where(
                GradingComponent.assignment_id == assignment_id,
                GradingComponent.name == name,
            )
        )
        return result.scalar_one_or_none()
