from __future__ import annotations

import io
import logging
import uuid
from pathlib import Path
from typing import Protocol

from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from ..core.constants import ALLOWED_PHOTO_FORMATS, DEFAULT_MAX_PHOTO_BYTES
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp"}


class PhotoStore(Protocol):
    def save(self, data: bytes, filename: str, *, folder: str = "photos") -> str:
        """Persist the image and return a URL reference to it."""
        raise NotImplementedError

    def delete(self, url: str) -> bool:
        """Remove a photo previously returned by ``save``. False when it is not ours."""
        raise NotImplementedError


class LocalPhotoStore(PhotoStore):
    """Stores verified images under ``upload_dir`` and serves them from ``base_url``."""

    def __init__(self, upload_dir: str | Path, base_url: str, *, max_bytes: int = DEFAULT_MAX_PHOTO_BYTES):
        self._upload_dir = Path(upload_dir)
        self._base_url = base_url.rstrip("/")
        self._max_bytes = int(max_bytes)

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    def _detect_format(self, data: bytes) -> str:
        if not data:
            raise ValidationError("Photo is empty")
        if len(data) > self._max_bytes:
            raise ValidationError(f"Photo is larger than {self._max_bytes // (1024 * 1024)} MB")
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
                fmt = (img.format or "").upper()
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ValidationError("Uploaded file is not a valid image") from exc
        if fmt not in ALLOWED_PHOTO_FORMATS:
            raise ValidationError(f"Unsupported image format: {fmt or 'unknown'}")
        return fmt

    def save(self, data: bytes, filename: str, *, folder: str = "photos") -> str:
        fmt = self._detect_format(data)
        stem = Path(secure_filename(filename or "")).stem or "photo"
        name = f"{uuid.uuid4().hex}_{stem}{_EXTENSIONS[fmt]}"
        folder = secure_filename(folder) or "photos"

        target_dir = self._upload_dir / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / name).write_bytes(data)
        logger.info("Stored %s photo %s/%s (%d bytes)", fmt, folder, name, len(data))
        return f"{self._base_url}/{folder}/{name}"

    def delete(self, url: str) -> bool:
        prefix = f"{self._base_url}/"
        if not url or not url.startswith(prefix):
            return False
        root = self._upload_dir.resolve()
        path = (root / url[len(prefix):]).resolve()
        if root not in path.parents:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Removed photo %s", path.relative_to(root))
        return True
