# ppdb_bot/infrastructure/external/whatsapp_media.py

import httpx

from ppdb_bot.core.config import settings

GRAPH_BASE = "https://graph.facebook.com"
GRAPH_VERSION = "v20.0"


def _wa_token() -> str:
    token = settings.WHATSAPP_ACCESS_TOKEN
    if not token:
        raise RuntimeError("WHATSAPP_ACCESS_TOKEN is not set")
    return token


async def get_media_url(media_id: str) -> str:
    """
    1) GET /{media_id} -> returns {"url": "..."}
    """
    url = f"{GRAPH_BASE}/{GRAPH_VERSION}/{media_id}"
    headers = {"Authorization": f"Bearer {_wa_token()}"}
    async with httpx.AsyncClient(timeout=30) as client:
        r = await client.get(url, headers=headers)
        r.raise_for_status()
        data = r.json()
        media_url = data.get("url")
        if not media_url:
            raise RuntimeError(f"WhatsApp media url not found for media_id={media_id}")
        return media_url


async def download_media(media_url: str) -> bytes:
    """
    2) GET bytes from returned media URL (still requires Authorization header)
    """
    headers = {"Authorization": f"Bearer {_wa_token()}"}
    async with httpx.AsyncClient(timeout=60) as client:
        r = await client.get(media_url, headers=headers)
        r.raise_for_status()
        return r.content


async def fetch_media(media_id: str) -> bytes:
    return await download_media(await get_media_url(media_id))


async def check_token() -> dict:
    """Ask the Graph API who owns the configured token."""
    if not settings.WHATSAPP_ACCESS_TOKEN:
        return {"ok": False, "reason": "No WHATSAPP_ACCESS_TOKEN set"}

    async with httpx.AsyncClient(timeout=20) as client:
        resp = await client.get(
            f"{GRAPH_BASE}/{GRAPH_VERSION}/me",
            params={"access_token": settings.WHATSAPP_ACCESS_TOKEN},
        )

    if resp.status_code != 200:
        try:
            err = resp.json().get("error", {})
        except ValueError:
            err = {}
        reason = "Token expired" if err.get("code") == 190 else "Token invalid or insufficient permissions"
        return {"ok": False, "reason": reason, "error": err}

    return {"ok": True, "reason": "Token valid (Graph /me check passed)"}
