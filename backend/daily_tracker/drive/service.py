"""Upload placement on local disk.

Files live under ``<upload_dir>/<user_id>/`` with a unique prefix so two
uploads with the same name never collide.
"""

import logging
import re
import shutil
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})

_UNSAFE_CHARS = re.compile(r"[^\w.\- ]+")


class UploadRejected(ValueError):
    """The uploaded file may not be stored. ``status_code`` is the HTTP answer."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


def safe_filename(filename: str | None) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip(" .")
    return name or "upload"


def user_upload_dir(upload_dir: str, user_id: str) -> Path:
    return Path(upload_dir) / safe_filename(user_id)


def save_upload(upload_dir: str, user_id: str, filename: str | None, mime_type: str | None,
                data: bytes, max_bytes: int) -> Path:
    """Validate and write an upload, returning where it was stored."""
    if (mime_type or "").lower() not in ALLOWED_MIME_TYPES:
        raise UploadRejected("Invalid file type. Only PDF and images are allowed.")
    if not data:
        raise UploadRejected("No file uploaded")
    if len(data) > max_bytes:
        raise UploadRejected(f"File too large (max {max_bytes // 1_048_576} MB)", status_code=413)

    target_dir = user_upload_dir(upload_dir, user_id)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / f"{uuid.uuid4().hex}-{safe_filename(filename)}"
    target.write_bytes(data)
    logger.info("Stored upload for user=%s (%d bytes, %s)", user_id, len(data), mime_type)
    return target


def remove_user_uploads(upload_dir: str, user_id: str) -> bool:
    """Delete every stored upload of a user. Returns False if nothing was there."""
    target_dir = user_upload_dir(upload_dir, user_id)
    if not target_dir.is_dir():
        return False
    try:
        shutil.rmtree(target_dir)
    except OSError:
        logger.warning("Could not remove upload directory %s", target_dir, exc_info=True)
        return False
    logger.info("Removed upload directory for user=%s", user_id)
    return True
