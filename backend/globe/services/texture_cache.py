"""
On-disk cache for downloaded surface textures.

Texture bytes are stored as ``storage/textures/{sha256}{ext}`` where the
hash is computed over the content, so two URLs serving identical images
share a file.  The URL to file mapping lives in :mod:`texture_store`.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional, Tuple

from .. import config
from .texture_store import (
    TextureCacheRecord,
    delete_texture_record,
    get_texture_record,
    upsert_texture_record,
)

logger = logging.getLogger(__name__)

TEXTURE_DIR = config.STORAGE_DIR / "textures"

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def _extension_for(content_type: str) -> str:
    return _EXTENSIONS.get(content_type.split(";")[0].strip().lower(), ".img")


def save_texture(source_url: str, data: bytes, content_type: str) -> TextureCacheRecord:
    """Write ``data`` to the cache and index it under ``source_url``.

    Args:
        source_url: URL the texture was downloaded from.
        data: Raw image bytes.
        content_type: MIME type reported by the server.

    Returns:
        The persisted :class:`TextureCacheRecord`.
    """
    TEXTURE_DIR.mkdir(parents=True, exist_ok=True)
    file_hash = hashlib.sha256(data).hexdigest()
    path = TEXTURE_DIR / f"{file_hash}{_extension_for(content_type)}"
    if not path.exists():
        path.write_bytes(data)
    record = TextureCacheRecord(
        source_url=source_url,
        file_hash=file_hash,
        file_path=str(path),
        content_type=content_type,
        filesize_bytes=len(data),
    )
    logger.info("Cached texture %s (%d bytes)", source_url, len(data))
    return upsert_texture_record(record)


def load_texture(source_url: str) -> Optional[Tuple[bytes, str]]:
    """Return ``(data, content_type)`` for a cached URL, or ``None``.

    Index entries whose file has gone missing or no longer matches its
    hash are dropped and reported as misses.
    """
    record = get_texture_record(source_url)
    if record is None:
        return None
    path = Path(record.file_path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.warning("Texture cache file unreadable for %s: %s", source_url, exc)
        delete_texture_record(source_url)
        return None
    if hashlib.sha256(data).hexdigest() != record.file_hash:
        logger.warning("Texture cache file for %s failed hash check", source_url)
        delete_texture_record(source_url)
        return None
    return data, record.content_type
