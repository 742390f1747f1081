from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ppdb_bot.domain.services.validators import parse_category

logger = logging.getLogger("domain.faq_service")

FAQ_KEYWORDS = ["syarat", "jadwal", "kontak", "biaya", "alamat", "beasiswa", "pendaftaran", "kuota"]

# Keywords whose answer differs per school level
CATEGORY_KEYWORDS = {"biaya", "syarat"}

FaqLookup = Callable[[str, Optional[str]], Awaitable[Optional[str]]]


class FaqService:
    def __init__(self, lookup: FaqLookup):
        self._lookup = lookup

    @staticmethod
    def match_keyword(text: str) -> Optional[str]:
        lower = (text or "").lower()
        return next((k for k in FAQ_KEYWORDS if k in lower), None)

    async def answer(self, keyword: str, text: str) -> Optional[str]:
        """Return the FAQ content for *keyword*, or None if there is none."""
        subkey = None
        if keyword in CATEGORY_KEYWORDS:
            category = parse_category(text)
            subkey = category.value if category else None
        try:
            return await self._lookup(keyword, subkey)
        except Exception:
            logger.exception("FAQ lookup failed keyword=%s subkey=%s", keyword, subkey)
            return None
