"""
Metadata index for cached surface textures.

A :class:`TextureCacheRecord` maps a texture source URL to the file on
disk that holds the bytes downloaded from it, along with the content
type, size and SHA-256 hash of those bytes.  The surface loader
consults this index before going to the network so a texture is only
downloaded once per storage directory.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import SQLModel, Field, select

from .db import create_db_and_tables, get_session

_tables_ready = False


class TextureCacheRecord(SQLModel, table=True):
    """Database model for a texture downloaded from a remote source."""

    id: Optional[int] = Field(default=None, primary_key=True)
    source_url: str = Field(index=True, unique=True)
    file_hash: str
    file_path: str
    content_type: str
    filesize_bytes: int
    created_at: datetime = Field(default_factory=datetime.utcnow)


def init_db() -> None:
    """Create the texture index table if needed."""
    global _tables_ready
    create_db_and_tables()
    _tables_ready = True


def _ensure_tables() -> None:
    if not _tables_ready:
        init_db()


def get_texture_record(source_url: str) -> Optional[TextureCacheRecord]:
    """Return the cache record for ``source_url`` if one exists."""
    _ensure_tables()
    with get_session() as session:
        statement = select(TextureCacheRecord).where(
            TextureCacheRecord.source_url == source_url
        )
        return session.exec(statement).first()


def upsert_texture_record(record: TextureCacheRecord) -> TextureCacheRecord:
    """Insert ``record``, replacing any existing record for the same URL."""
    _ensure_tables()
    with get_session() as session:
        statement = select(TextureCacheRecord).where(
            TextureCacheRecord.source_url == record.source_url
        )
        existing = session.exec(statement).first()
        if existing is not None:
            session.delete(existing)
            session.commit()
        session.add(record)
        session.commit()
        session.refresh(record)
        return record


def delete_texture_record(source_url: str) -> None:
    _ensure_tables()
    with get_session() as session:
        statement = select(TextureCacheRecord).where(
            TextureCacheRecord.source_url == source_url
        )
        existing = session.exec(statement).first()
        if existing is None:
            return
        session.delete(existing)
        session.commit()


def list_texture_records() -> List[TextureCacheRecord]:
    _ensure_tables()
    with get_session() as session:
        return list(session.exec(select(TextureCacheRecord)))
