"""
Filesystem-backed blob store for resumes, avatars and cover images.

Blobs live under ``<root>/<bucket>/<user_id>/...`` and are served from
``<public_base_url>/storage/<bucket>/<path>``. Every object path starts
with the owning user's id so that an account purge is a prefix delete.
"""

import logging
import shutil
import time
import uuid
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from jobtracker.models.errors import create_storage_error, create_validation_error
from jobtracker.utils.file_ops import atomic_write_bytes, file_extension

logger = logging.getLogger(__name__)

RESUMES_BUCKET = "resumes"
PROFILE_MEDIA_BUCKET = "profile-media"
BUCKETS = (RESUMES_BUCKET, PROFILE_MEDIA_BUCKET)

MEDIA_KINDS = ("avatar", "cover")


def resume_object_path(user_id: str, filename: str) -> str:
    """``<user_id>/<random>.<ext>``; the original filename is kept only as display name."""
    return f"{user_id}/{uuid.uuid4().hex}.{file_extension(filename)}"


def media_object_path(
    user_id: str, kind: str, filename: str, now_ms: Optional[int] = None
) -> str:
    """``<user_id>/<avatar|cover>-<epoch ms>.<ext>``."""
    if kind not in MEDIA_KINDS:
        raise create_validation_error(
            f"Invalid media kind: '{kind}'. Allowed values are: {', '.join(MEDIA_KINDS)}"
        )
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}/{kind}-{stamp}.{file_extension(filename)}"


class LocalBlobStore:
    """
    Blob store writing to a local directory.

    Usage:
        store = LocalBlobStore("data/storage", "http://localhost:8000")
        url = store.upload("resumes", "user-1/abc.pdf", pdf_bytes)
    """

    def __init__(self, root: Union[str, Path], public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in BUCKETS:
            raise create_validation_error(
                f"Invalid bucket: '{bucket}'. Allowed values are: {', '.join(BUCKETS)}"
            )
        relative = PurePosixPath(path)
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise create_validation_error(f"Invalid object path: '{path}'")
        return self.root / bucket / Path(*relative.parts)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/storage/{bucket}/{path}"

    def upload(self, bucket: str, path: str, data: bytes) -> str:
        """
        Store ``data`` at ``bucket/path`` and return its public URL.

        Raises:
            ToolError: VALIDATION_ERROR for a bad bucket/path,
                STORAGE_ERROR if the write fails
        """
        target = self._resolve(bucket, path)
        try:
            atomic_write_bytes(target, data)
        except OSError as e:
            raise create_storage_error(str(e), original_error=e) from e

        logger.debug("Uploaded %d bytes to %s/%s", len(data), bucket, path)
        return self.public_url(bucket, path)

    def list(self, bucket: str, prefix: str) -> List[str]:
        """Object paths under ``prefix`` (a user id directory)."""
        directory = self._resolve(bucket, prefix)
        if not directory.is_dir():
            return []
        return sorted(
            f"{prefix}/{item.relative_to(directory).as_posix()}"
            for item in directory.rglob("*")
            if item.is_file()
        )

    def remove_prefix(self, bucket: str, prefix: str) -> int:
        """
        Delete every object under ``prefix``.

        Returns:
            Number of objects removed

        Raises:
            ToolError: STORAGE_ERROR if deletion fails
        """
        objects = self.list(bucket, prefix)
        if not objects:
            return 0
        try:
            shutil.rmtree(self._resolve(bucket, prefix))
        except OSError as e:
            raise create_storage_error(str(e), original_error=e) from e
        return len(objects)
