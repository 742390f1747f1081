import re

import httpx

from ppdb_bot.core.config import settings

WA_BASE = "https://graph.facebook.com/v20.0"


def normalize_number(number: str, country_code: str | None = None) -> str | None:
    """Turn a local or formatted phone number into a WhatsApp id (digits only)."""
    if not number:
        return None
    country_code = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = re.sub(r"\D", "", str(number))
    if not digits:
        return None
    if digits.startswith("0"):
        digits = country_code + digits[1:]
    if not digits.startswith(country_code):
        digits = country_code + digits
    return digits


async def send_whatsapp_text(to: str, text: str):
    if not settings.WHATSAPP_PHONE_NUMBER_ID:
        raise RuntimeError("WHATSAPP_PHONE_NUMBER_ID is not set")

    url = f"{WA_BASE}/{settings.WHATSAPP_PHONE_NUMBER_ID}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": { "body": text }
    }
    headers = {
        "Authorization": f"Bearer {settings.WHATSAPP_ACCESS_TOKEN}",
        "Content-Type": "application/json"
    }

    async with httpx.AsyncClient(timeout=30) as client:
        r = await client.post(url, json=payload, headers=headers)
        r.raise_for_status()
