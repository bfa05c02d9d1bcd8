# Overview: Image uploads for brand backgrounds and product pictures.

from __future__ import annotations

import os
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from ..validation import ValidationError


ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}
IMAGE_URL_PREFIX = "/Images/"


def upload_folder() -> str:
    folder = os.path.abspath(current_app.config["UPLOAD_FOLDER"])
    os.makedirs(folder, exist_ok=True)
    return folder


def _extension(filename: str) -> str:
    name = secure_filename(filename or "")
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def save_image(file_storage) -> str:
    """
    Validate and store an uploaded image; return its relative URL.

    Rules: jpg/jpeg/png/gif only, at most MAX_IMAGE_BYTES. Stored under a
    random name so client filenames never reach the filesystem.
    """
    if file_storage is None or not file_storage.filename:
        raise ValidationError("Vui lòng chọn ảnh để tải lên.")

    ext = _extension(file_storage.filename)
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Định dạng ảnh không hợp lệ.")

    max_bytes = current_app.config["MAX_IMAGE_BYTES"]
    data = file_storage.stream.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationError("Ảnh vượt quá 5MB.")
    if not data:
        raise ValidationError("Vui lòng chọn ảnh để tải lên.")

    filename = f"{uuid.uuid4().hex}.{ext}"
    with open(os.path.join(upload_folder(), filename), "wb") as fh:
        fh.write(data)
    return IMAGE_URL_PREFIX + filename


def delete_image(url: str | None) -> None:
    """Remove a previously stored image; foreign or missing paths are ignored."""
    if not url or not url.startswith(IMAGE_URL_PREFIX):
        return
    filename = secure_filename(url[len(IMAGE_URL_PREFIX):])
    if not filename:
        return
    path = os.path.join(upload_folder(), filename)
    if os.path.isfile(path):
        os.remove(path)
