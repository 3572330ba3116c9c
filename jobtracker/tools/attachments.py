"""
Upload helpers for resume and profile media files.

Uploads finish before the owning record is touched. A failed resume upload
is reported as a warning and the record is saved without the new reference.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from jobtracker.models.errors import ToolError, create_validation_error
from jobtracker.models.session import Session
from jobtracker.tools.context import ToolContext
from jobtracker.utils.blob_store import (
    PROFILE_MEDIA_BUCKET,
    RESUMES_BUCKET,
    media_object_path,
    resume_object_path,
)

logger = logging.getLogger(__name__)


def upload_resume(
    ctx: ToolContext, session: Session, file_path: str, warnings: List[str]
) -> Optional[Dict[str, str]]:
    """
    Upload a local resume file for ``session``'s user.

    Returns:
        ``{"resume_url": ..., "resume_name": ...}`` or None when the upload
        was skipped (demo mode) or failed; a warning is appended in both cases
    """
    if session.is_demo:
        warnings.append("Resume attachments are not saved in demo mode")
        return None

    source = Path(file_path)
    try:
        data = source.read_bytes()
        url = ctx.blobs.upload(RESUMES_BUCKET, resume_object_path(session.user_id, source.name), data)
    except (OSError, ToolError) as e:
        logger.warning("Resume upload failed for user %s: %s", session.user_id, e)
        warnings.append(f"Resume upload failed; application saved without it: {source.name}")
        return None

    return {"resume_url": url, "resume_name": source.name}


def upload_profile_media(ctx: ToolContext, session: Session, kind: str, file_path: str) -> str:
    """
    Upload an avatar or cover image and return its public URL.

    Raises:
        ToolError: VALIDATION_ERROR for a missing file or bad kind, STORAGE_ERROR on write failure
    """
    source = Path(file_path)
    try:
        data = source.read_bytes()
    except OSError as e:
        raise create_validation_error(f"Cannot read {kind} file: {source.name}") from e
    return ctx.blobs.upload(
        PROFILE_MEDIA_BUCKET, media_object_path(session.user_id, kind, source.name), data
    )
