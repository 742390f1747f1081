# ppdb_bot/infrastructure/external/supabase_storage.py

import httpx

from ppdb_bot.core.config import settings


class SupabaseStorage:
    """Minimal client for the Supabase Storage REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        bucket: str | None = None,
    ):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.service_key = service_key or settings.SUPABASE_SERVICE_KEY
        self.bucket = bucket or settings.STORAGE_BUCKET
        if not self.base_url or not self.service_key:
            raise RuntimeError("SUPABASE_URL / SUPABASE_SERVICE_KEY is not set")

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        POST /storage/v1/object/{bucket}/{path} (upsert) and return the public URL.
        """
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
            "Content-Type": content_type,
            "x-upsert": "true",
        }
        async with httpx.AsyncClient(timeout=60) as client:
            r = await client.post(url, content=data, headers=headers)
            r.raise_for_status()
        return self.public_url(path)
