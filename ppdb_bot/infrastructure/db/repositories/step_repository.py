from typing import Sequence

from loguru import logger
from sqlalchemy import select

from ppdb_bot.domain.models.intake import Category, InputKind, StepDefinition
from ppdb_bot.infrastructure.db.models import FormStep


class SqlStepSource:
    """Reads the ``form_steps`` table, one short-lived DB session per lookup."""

    def __init__(self, session_factory, terminal_field_key: str = "foto"):
        self._session_factory = session_factory
        self._terminal_field_key = terminal_field_key

    async def rows_for_step(self, step: int) -> Sequence[StepDefinition]:
        stmt = select(FormStep).where(FormStep.step == step).order_by(FormStep.id)
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = list(result.scalars().all())

        definitions = []
        for row in rows:
            definition = self._to_definition(row)
            if definition is not None:
                definitions.append(definition)
        return definitions

    def _to_definition(self, row: FormStep) -> StepDefinition | None:
        try:
            category = Category(row.category.upper()) if row.category else None
            input_kind = InputKind(row.input_kind.lower())
        except ValueError:
            logger.warning(
                "Skipping form_steps row id={} with unknown category/input kind ({}, {})",
                row.id, row.category, row.input_kind,
            )
            return None

        return StepDefinition(
            step=row.step,
            category=category,
            instruction=row.instruction,
            input_kind=input_kind,
            field_key=row.field_key,
            is_terminal=bool(row.is_terminal) or row.field_key == self._terminal_field_key,
        )
