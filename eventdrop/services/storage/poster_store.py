from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path

from eventdrop.config import settings
from eventdrop.core.errors import StorageFailure

logger = logging.getLogger(__name__)

POSTER_URL_PREFIX = "/posters"


class PosterStore:
    """Filesystem bucket for uploaded posters, served under ``/posters``."""

    def __init__(self, base_dir: str | Path | None = None, public_base_url: str | None = None) -> None:
        self.base_dir = Path(base_dir or settings.POSTER_STORAGE_DIR)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def save(self, data: bytes, folder: str = "anonymous", extension: str = "jpg") -> tuple[str, str]:
        name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{extension}"
        relative = f"{folder}/{name}"
        target = self._resolve(relative)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("Storage upload error path=%s: %s", relative, exc)
            raise StorageFailure() from exc
        return relative, self.public_url(relative)

    def load(self, relative: str) -> bytes:
        try:
            return self._resolve(relative).read_bytes()
        except OSError as exc:
            raise StorageFailure(f"Poster not readable: {relative}") from exc

    def public_url(self, relative: str) -> str:
        return f"{self.public_base_url}{POSTER_URL_PREFIX}/{relative}"

    def _resolve(self, relative: str) -> Path:
        base = self.base_dir.resolve()
        target = (base / relative).resolve()
        if base not in target.parents:
            raise StorageFailure(f"Invalid poster path: {relative}")
        return target


def sniff_image_type(data: bytes) -> tuple[str, str] | None:
    """Return ``(mime_type, extension)`` for the image formats we accept."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg", "jpg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png", "png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif", "gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp", "webp"
    return None
