"""Media type helpers for attachments."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from core.constants import GENERIC_BINARY_TYPE

EXTENSION_MEDIA_TYPES = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".jsx": "text/javascript",
    ".ts": "text/javascript",
    ".tsx": "text/javascript",
    ".json": "application/json",
    ".csv": "text/csv",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def classify_media_type(declared_type: Optional[str], file_name: str) -> str:
    """Resolve the effective media type of a file.

    A declared type wins unless it is empty or the generic binary type. Then
    the extension table is consulted, and anything unknown is generic binary.
    """
    if declared_type and declared_type != GENERIC_BINARY_TYPE:
        return declared_type
    suffix = PurePath(file_name).suffix.lower()
    return EXTENSION_MEDIA_TYPES.get(suffix, GENERIC_BINARY_TYPE)


def is_image(media_type: str) -> bool:
    return media_type.startswith("image/")
