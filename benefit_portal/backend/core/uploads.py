"""Local-disk storage for applicant documents."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from werkzeug.utils import secure_filename

from benefit_portal.backend.core.errors import PayloadTooLarge, ValidationFailed
from benefit_portal.backend.core.utils.config import UploadSettings

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024


@dataclass
class StoredFile:
    original_name: str
    path: Path
    size_bytes: int


def allowed_file(filename: str, allowed_extensions: list[str]) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in {
        ext.lower() for ext in allowed_extensions
    }


def unique_name(filename: str) -> str:
    """``<epoch millis>-<random>-<sanitized original>``."""
    safe = secure_filename(filename) or "upload"
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{safe}"


def save_upload(stream: BinaryIO, filename: str, settings: UploadSettings) -> StoredFile:
    """
    Copy an uploaded stream to the upload directory.

    Raises:
        ValidationFailed: If the extension is not allowed
        PayloadTooLarge: If the file exceeds ``settings.max_bytes``; the
            partial file is removed
    """
    if not filename or not allowed_file(filename, settings.allowed_extensions):
        raise ValidationFailed(
            "File type not allowed. Allowed types: " + ", ".join(settings.allowed_extensions),
            field="file",
        )

    upload_dir = Path(settings.directory)
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / unique_name(filename)

    size = 0
    with open(target, "wb") as out:
        while chunk := stream.read(_CHUNK):
            size += len(chunk)
            if size > settings.max_bytes:
                break
            out.write(chunk)

    if size > settings.max_bytes:
        target.unlink(missing_ok=True)
        raise PayloadTooLarge(
            f"File too large. Maximum size is {settings.max_bytes // (1024 * 1024)} MB",
            field="file",
        )

    logger.info("Stored upload %s (%d bytes)", target.name, size)
    return StoredFile(original_name=filename, path=target, size_bytes=size)
