# ppdb_bot/infrastructure/external/media_uploader.py
"""
Moves a document the applicant sent over WhatsApp into blob storage.
"""

import time
from typing import Awaitable, Callable, Optional

import httpx
from loguru import logger

from ppdb_bot.domain.errors import UploadError
from ppdb_bot.domain.services.upload_security import validate_upload
from ppdb_bot.infrastructure.external.supabase_storage import SupabaseStorage
from ppdb_bot.infrastructure.external.whatsapp_media import fetch_media

DEFAULT_MIME = {
    "image": "image/jpeg",
    "document": "application/pdf",
}


class MediaUploader:
    def __init__(
        self,
        storage: SupabaseStorage,
        fetch: Callable[[str], Awaitable[bytes]] = fetch_media,
    ):
        self._storage = storage
        self._fetch = fetch

    async def upload(
        self,
        file_kind: str,
        file_ref: str,
        key_prefix: str,
        mime_type: Optional[str] = None,
    ) -> str:
        mime_type = mime_type or DEFAULT_MIME.get(file_kind, "application/octet-stream")

        try:
            data = await self._fetch(file_ref)
        except (httpx.HTTPError, RuntimeError, ValueError) as exc:
            raise UploadError(f"download of media {file_ref} failed: {exc}") from exc

        check = validate_upload(data, mime_type)
        if not check.is_safe:
            raise UploadError(f"rejected upload for {key_prefix}: {check.reason}")

        path = f"{key_prefix}_{int(time.time() * 1000)}.{check.extension}"
        try:
            url = await self._storage.upload(path, data, mime_type)
        except httpx.HTTPError as exc:
            raise UploadError(f"storing {path} failed: {exc}") from exc

        logger.info("Stored {} ({} bytes) at {}", file_kind, check.file_size, path)
        return url
