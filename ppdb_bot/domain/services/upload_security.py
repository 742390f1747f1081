"""Checks run on downloaded registration documents before they are stored.

Rejects empty payloads, MIME types outside the allow-list, oversized files,
content whose magic bytes contradict the claimed type, and PDFs carrying
active content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_IMAGE_SIZE = 10 * 1024 * 1024   # 10 MB
MAX_PDF_SIZE = 25 * 1024 * 1024     # 25 MB

# MIME type -> file extension used for the stored object
ALLOWED_MIME_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "application/pdf": "pdf",
}

MAGIC_JPEG = b"\xff\xd8\xff"
MAGIC_PNG = b"\x89PNG\r\n\x1a\n"
MAGIC_PDF = b"%PDF-"

_PDF_SUSPICIOUS_PATTERNS: list[bytes] = [
    b"/JavaScript",
    b"/JS",
    b"/Launch",
    b"/EmbeddedFile",
    b"/RichMedia",
]


@dataclass
class UploadValidationResult:
    is_safe: bool
    reason: Optional[str]
    extension: str
    file_size: int


def _is_webp(data: bytes) -> bool:
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP"


_MAGIC_CHECKS: dict[str, Callable[[bytes], bool]] = {
    "image/jpeg": lambda data: data.startswith(MAGIC_JPEG),
    "image/png": lambda data: data.startswith(MAGIC_PNG),
    "image/webp": _is_webp,
    "application/pdf": lambda data: data.startswith(MAGIC_PDF),
}


def _scan_pdf(data: bytes) -> Optional[str]:
    for pattern in _PDF_SUSPICIOUS_PATTERNS:
        if pattern in data:
            return f"PDF contains suspicious pattern: {pattern.decode('ascii')}"
    return None


def validate_upload(file_bytes: bytes, mime_type: str) -> UploadValidationResult:
    size = len(file_bytes)
    mime_type = (mime_type or "").split(";")[0].strip().lower()

    if size == 0:
        return UploadValidationResult(False, "File is empty", "bin", 0)

    extension = ALLOWED_MIME_TYPES.get(mime_type)
    if extension is None:
        return UploadValidationResult(False, f"MIME type not allowed: {mime_type}", "bin", size)

    limit = MAX_PDF_SIZE if extension == "pdf" else MAX_IMAGE_SIZE
    if size > limit:
        return UploadValidationResult(
            False, f"File exceeds {limit // (1024 * 1024)} MB limit ({size} bytes)", extension, size
        )

    if not _MAGIC_CHECKS[mime_type](file_bytes):
        return UploadValidationResult(
            False, f"File content does not match claimed MIME type {mime_type}", extension, size
        )

    if extension == "pdf":
        issue = _scan_pdf(file_bytes)
        if issue:
            return UploadValidationResult(False, issue, extension, size)

    return UploadValidationResult(True, None, extension, size)
