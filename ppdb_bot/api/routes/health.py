from fastapi import APIRouter

from ppdb_bot.api.deps import whatsapp_configured
from ppdb_bot.infrastructure.external.whatsapp_media import check_token

router = APIRouter()


@router.get("/")
async def root():
    return {"status": "ok", "message": "Bot WhatsApp PPDB aktif"}


@router.get("/health")
async def health():
    return {"ok": True, "waConnected": whatsapp_configured()}


@router.get("/pairing-status")
async def pairing_status():
    """
    Report whether the bot is linked to a WhatsApp number, i.e. whether the
    configured Cloud API token is still accepted by the Graph API.
    """
    if not whatsapp_configured():
        return {"paired": False, "reason": "WhatsApp credentials are not configured"}

    result = await check_token()
    return {"paired": result["ok"], **result}
