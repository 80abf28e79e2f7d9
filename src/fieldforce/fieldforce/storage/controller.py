from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from flask import Flask, request, send_from_directory

from ..common.web import login_required, ok
from ..core.exceptions import ValidationError
from ..container import Container
from .photo_store import PhotoStore

logger = logging.getLogger(__name__)


def read_upload(field: str = "photo"):
    """Return (bytes, filename) of an uploaded file, or (None, None)."""
    upload = request.files.get(field)
    if upload is None or not upload.filename:
        return None, None
    return upload.read(), upload.filename


@contextmanager
def stored_upload(store: PhotoStore, *, folder: str, photo_url: Optional[str] = None) -> Iterator[Optional[str]]:
    """Save the request's photo and yield its URL; the file is removed if the block fails."""
    data, filename = read_upload()
    if data is None:
        yield photo_url
        return
    url = store.save(data, filename, folder=folder)
    try:
        yield url
    except Exception:
        logger.info("Discarding photo %s after failed request", url)
        store.delete(url)
        raise


def register(app: Flask, container: Container) -> None:
    store = container.photo_store

    @app.route("/api/photos", methods=["POST"], endpoint="api_photo_upload")
    @login_required
    def upload_photo():
        data, filename = read_upload()
        if data is None:
            raise ValidationError("photo file is required")
        folder = request.form.get("folder", "photos")
        return ok({"url": store.save(data, filename, folder=folder)}, status=201)

    @app.route("/uploads/<path:filename>", methods=["GET"], endpoint="uploaded_file")
    @login_required
    def uploaded_file(filename: str):
        return send_from_directory(store.upload_dir, filename)
