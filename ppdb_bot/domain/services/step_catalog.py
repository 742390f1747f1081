# ppdb_bot/domain/services/step_catalog.py
"""
Step catalog: resolves the instruction for ``(step, category)``.

Branching between school levels lives entirely in the data. A
category-specific definition wins over the ``category=None`` fallback,
and among duplicates the first one in source order wins, so repeated
lookups within a session always return the same row.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, Sequence

from ppdb_bot.domain.errors import LookupInconsistency
from ppdb_bot.domain.models.intake import Category, StepDefinition

logger = logging.getLogger("domain.step_catalog")


class StepSource(Protocol):
    async def rows_for_step(self, step: int) -> Sequence[StepDefinition]:
        """Return every definition for *step* in insertion order."""
        ...


def pick_definition(
    rows: Iterable[StepDefinition], category: Optional[Category]
) -> Optional[StepDefinition]:
    fallback: Optional[StepDefinition] = None
    for row in rows:
        if category is not None and row.category == category:
            return row
        if row.category is None and fallback is None:
            fallback = row
    return fallback


class StepCatalog:
    def __init__(self, source: StepSource):
        self._source = source

    async def lookup(
        self, step: int, category: Optional[Category] = None
    ) -> Optional[StepDefinition]:
        """Return the definition for the step or None.

        Source failures are logged and reported as a missing step.
        """
        try:
            rows = await self._source.rows_for_step(step)
        except Exception:
            logger.exception("step lookup failed step=%s category=%s", step, category)
            return None

        definition = pick_definition(rows, category)
        if definition is None:
            logger.debug("no step definition step=%s category=%s", step, category)
        return definition

    async def require(
        self, step: int, category: Optional[Category] = None
    ) -> StepDefinition:
        """Like :meth:`lookup` but raises :class:`LookupInconsistency` when missing."""
        definition = await self.lookup(step, category)
        if definition is None:
            raise LookupInconsistency(step, category.value if category else None)
        return definition


class InMemoryStepSource:
    """Step source backed by a list, used for seeding and tests."""

    def __init__(self, definitions: Iterable[StepDefinition] = ()):
        self._definitions: list[StepDefinition] = list(definitions)

    def add(self, definition: StepDefinition) -> None:
        self._definitions.append(definition)

    def remove(self, step: int, category: Optional[Category] = None) -> None:
        self._definitions = [
            d for d in self._definitions
            if not (d.step == step and d.category == category)
        ]

    async def rows_for_step(self, step: int) -> Sequence[StepDefinition]:
        return [d for d in self._definitions if d.step == step]
