"""
Surface appearance loading for the globe.

Every session starts with a procedurally generated Earth-like texture
(a blue ocean gradient with random green landmasses) so the globe is
usable immediately.  A higher quality texture is then fetched in the
background from an ordered list of candidate sources:

* the candidates are tried one at a time, in order;
* the first success replaces the procedural texture and stops the loop;
* a failure is recorded and the next candidate is tried;
* when every candidate has failed the procedural texture is kept.

Loading never raises into the caller and never touches pins, arcs or
the flight animation; it only mutates the session's
:class:`SurfaceAppearance`.

Fetchers are plain async callables ``fetcher(source) -> Texture`` that
raise :class:`TextureFetchError` on failure, which makes the loop easy
to exercise with a fake fetcher.  :class:`HttpTextureFetcher` is the
production implementation built on ``httpx``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Literal, Optional, Sequence, Tuple

import httpx
import numpy as np
from sqlalchemy.exc import SQLAlchemyError

from .. import config
from .texture_cache import load_texture, save_texture

logger = logging.getLogger(__name__)

SurfaceStatus = Literal["pending", "loading", "loaded", "fallback"]

PROCEDURAL_SOURCE = "procedural"

# Ocean gradient endpoints and land colour of the procedural texture
_DEEP_OCEAN = np.array([0x1E, 0x3C, 0x72], dtype=float)
_MID_OCEAN = np.array([0x2A, 0x52, 0x98], dtype=float)
_LAND = np.array([0x22, 0x8B, 0x22], dtype=np.uint8)


class TextureFetchError(Exception):
    """Raised by a fetcher when a candidate texture cannot be used."""


@dataclass(frozen=True)
class Texture:
    """Raw image bytes obtained from a texture source."""

    source: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class LoadAttempt:
    source: str
    ok: bool
    error: Optional[str] = None


TextureFetcher = Callable[[str], Awaitable[Texture]]


def generate_procedural_texture(
    width: int = config.PROCEDURAL_TEXTURE_SIZE[0],
    height: int = config.PROCEDURAL_TEXTURE_SIZE[1],
    landmasses: int = config.PROCEDURAL_LANDMASSES,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Return an ``(height, width, 3)`` uint8 Earth-like RGB image.

    The ocean is a diagonal gradient from deep blue to a lighter blue and
    back; landmasses are filled discs of random position and a radius
    between 10 and 40 pixels.
    """
    rng = np.random.default_rng(seed)
    ys, xs = np.mgrid[0:height, 0:width]
    # Position along the diagonal from the top-left to the bottom-right
    # corner, folded so the middle is lightest.
    diag = (xs * width + ys * height) / float(width * width + height * height)
    weight = 1.0 - np.abs(2.0 * diag - 1.0)
    image = _DEEP_OCEAN + (_MID_OCEAN - _DEEP_OCEAN) * weight[..., None]
    image = np.clip(np.rint(image), 0, 255).astype(np.uint8)

    for _ in range(landmasses):
        cx = rng.random() * width
        cy = rng.random() * height
        size = rng.random() * 30.0 + 10.0
        mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= size * size
        image[mask] = _LAND
    return image


def encode_ppm(image: np.ndarray) -> bytes:
    """Encode an RGB uint8 image as a binary PPM (P6)."""
    height, width = image.shape[:2]
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    return header + np.ascontiguousarray(image, dtype=np.uint8).tobytes()


class SurfaceAppearance:
    """The sphere's current surface texture and its loading history."""

    def __init__(self, procedural: Optional[np.ndarray] = None) -> None:
        self.procedural = procedural if procedural is not None else generate_procedural_texture()
        self.texture: Optional[Texture] = None
        self.status: SurfaceStatus = "pending"
        self.attempts: List[LoadAttempt] = []

    @property
    def source(self) -> str:
        return self.texture.source if self.texture is not None else PROCEDURAL_SOURCE

    def apply(self, texture: Texture) -> None:
        self.texture = texture
        self.status = "loaded"

    def content(self) -> Tuple[bytes, str]:
        """Return ``(bytes, media_type)`` of the texture currently shown."""
        if self.texture is not None:
            return self.texture.data, self.texture.content_type
        return encode_ppm(self.procedural), "image/x-portable-pixmap"


async def load_surface(
    appearance: SurfaceAppearance,
    sources: Sequence[str],
    fetcher: TextureFetcher,
) -> Optional[str]:
    """Try ``sources`` in order until one yields a texture.

    Args:
        appearance: Appearance to update on success.
        sources: Ordered candidate texture sources.
        fetcher: Async callable fetching one source.

    Returns:
        The source that was applied, or ``None`` if every candidate
        failed (the procedural texture is kept).
    """
    appearance.status = "loading"
    for index, source in enumerate(sources):
        try:
            texture = await fetcher(source)
        except TextureFetchError as exc:
            logger.warning(
                "Texture source %d/%d failed (%s): %s", index + 1, len(sources), source, exc
            )
            appearance.attempts.append(LoadAttempt(source=source, ok=False, error=str(exc)))
            continue
        appearance.attempts.append(LoadAttempt(source=source, ok=True))
        appearance.apply(texture)
        logger.info("Surface texture loaded from %s", source)
        return source

    appearance.status = "fallback"
    logger.info("No texture source available; keeping procedural surface")
    return None


class HttpTextureFetcher:
    """Fetch textures over HTTP(S) with ``httpx``, backed by the disk cache.

    A response counts as a texture only if it has status 200, an
    ``image/*`` content type and a non-empty body.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = config.TEXTURE_FETCH_TIMEOUT,
        use_cache: bool = True,
    ) -> None:
        self._client = client
        self.timeout = timeout
        self.use_cache = use_cache

    async def __call__(self, source: str) -> Texture:
        if self.use_cache:
            cached = await self._read_cache(source)
            if cached is not None:
                data, content_type = cached
                logger.debug("Texture cache hit for %s", source)
                return Texture(source=source, content_type=content_type, data=data)

        if self._client is not None:
            texture = await self._fetch(self._client, source)
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                texture = await self._fetch(client, source)

        if self.use_cache:
            await self._write_cache(texture)
        return texture

    async def _read_cache(self, source: str) -> Optional[Tuple[bytes, str]]:
        # Hashing a multi-megabyte texture and querying SQLite both block,
        # so the cache is consulted from a worker thread.
        try:
            return await asyncio.to_thread(load_texture, source)
        except (OSError, SQLAlchemyError) as exc:
            logger.warning("Texture cache lookup failed for %s, treating as a miss: %s", source, exc)
            return None

    async def _write_cache(self, texture: Texture) -> None:
        try:
            await asyncio.to_thread(
                save_texture, texture.source, texture.data, texture.content_type
            )
        except (OSError, SQLAlchemyError) as exc:
            logger.warning("Could not cache texture from %s: %s", texture.source, exc)

    async def _fetch(self, client: httpx.AsyncClient, source: str) -> Texture:
        try:
            response = await client.get(source)
        except httpx.HTTPError as exc:
            raise TextureFetchError(f"request failed: {exc!r}") from exc
        if response.status_code != 200:
            raise TextureFetchError(f"HTTP {response.status_code}")
        content_type = response.headers.get("content-type", "")
        if not content_type.lower().startswith("image/"):
            raise TextureFetchError(f"not an image (content-type {content_type!r})")
        if not response.content:
            raise TextureFetchError("empty response body")
        return Texture(source=source, content_type=content_type, data=response.content)
