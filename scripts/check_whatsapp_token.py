# scripts/check_whatsapp_token.py

import asyncio
import os
import sys

from loguru import logger

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from ppdb_bot.infrastructure.external.whatsapp_media import check_token


async def main() -> int:
    result = await check_token()
    if result["ok"]:
        logger.success(result["reason"])
        return 0
    logger.error("{} {}", result["reason"], result.get("error", ""))
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
