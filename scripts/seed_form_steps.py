# scripts/seed_form_steps.py
"""
Load the default registration flow into ``form_steps`` and make sure every
school level has a ``quota`` row.

    python scripts/seed_form_steps.py --quota 100
"""

import argparse
import asyncio
import os
import sys

from loguru import logger

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from sqlalchemy import delete, select

from ppdb_bot.core.db import AsyncSessionLocal
from ppdb_bot.domain.models.intake import Category
from ppdb_bot.domain.services.default_flow import default_flow
from ppdb_bot.infrastructure.db.models import FormStep, Quota


async def seed(quota: int, replace: bool) -> None:
    async with AsyncSessionLocal() as db:
        existing = (await db.execute(select(FormStep.id).limit(1))).scalar_one_or_none()
        if existing is not None and not replace:
            logger.warning("form_steps already populated; use --replace to overwrite")
        else:
            await db.execute(delete(FormStep))
            for definition in default_flow():
                db.add(
                    FormStep(
                        step=definition.step,
                        category=definition.category.value if definition.category else None,
                        instruction=definition.instruction,
                        input_kind=definition.input_kind.value,
                        field_key=definition.field_key,
                        is_terminal=definition.is_terminal,
                    )
                )
            logger.info("Seeded {} form steps", len(default_flow()))

        for category in Category:
            row = await db.get(Quota, category.value)
            if row is None:
                db.add(Quota(category=category.value, remaining=quota))
                logger.info("Quota {} set to {}", category.value, quota)

        await db.commit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--quota", type=int, default=100)
    parser.add_argument("--replace", action="store_true")
    args = parser.parse_args()
    asyncio.run(seed(args.quota, args.replace))
