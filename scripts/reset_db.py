# scripts/reset_db.py
"""
Drop and recreate every intake table, optionally reseeding the default flow.

    python scripts/reset_db.py --seed --quota 100

Sessions kept in redis are not touched.
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
if CURRENT_DIR not in sys.path:
    sys.path.append(CURRENT_DIR)

from ppdb_bot.core.db import engine
from ppdb_bot.core.logging_config import setup_logging
from ppdb_bot.infrastructure.db.base import Base
from ppdb_bot.infrastructure.db import models  # noqa: F401  (registers tables)
from seed_form_steps import seed


async def reset_db(reseed: bool, quota: int) -> None:
    tables = ", ".join(sorted(Base.metadata.tables))
    logger.warning("Dropping tables: {}", tables)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.success("Schema recreated")

    if reseed:
        await seed(quota, replace=True)

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="load the default flow and quotas")
    parser.add_argument("--quota", type=int, default=100)
    args = parser.parse_args()

    setup_logging()
    asyncio.run(reset_db(args.seed, args.quota))
