"""
Atomic file operations for the local blob store.

Writes go to a temporary file in the target directory and are renamed
into place, so a blob is never visible in a partially written state.
"""

import os
import tempfile
from pathlib import Path
from typing import Union


def atomic_write_bytes(file_path: Union[str, Path], content: bytes) -> None:
    """
    Write bytes to a file atomically using temporary file + rename.

    File handles are always closed and the temporary file removed, even on failure.

    Args:
        file_path: Target file path (string or Path object)
        content: Bytes to write

    Raises:
        OSError: If directory creation, file write, or rename fails
    """
    file_path = Path(file_path)

    # Ensure parent directory exists
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd = None
    temp_path = None

    try:
        # Same directory as target so that the rename stays on one filesystem
        temp_fd, temp_path = tempfile.mkstemp(
            dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
        )

        os.write(temp_fd, content)
        os.fsync(temp_fd)

        os.close(temp_fd)
        temp_fd = None

        # os.replace is atomic on both Unix and Windows
        os.replace(temp_path, file_path)

    except Exception:
        if temp_fd is not None:
            try:
                os.close(temp_fd)
            except OSError:
                pass

        if temp_path is not None and os.path.exists(temp_path):
            try:
                os.unlink(temp_path)
            except OSError:
                pass

        raise


def file_extension(filename: str, default: str = "bin") -> str:
    """
    Lowercase extension of ``filename`` without the dot.

    Examples:
        >>> file_extension("My Resume.PDF")
        'pdf'
        >>> file_extension("README")
        'bin'
    """
    suffix = Path(filename).suffix
    return suffix[1:].lower() if suffix else default
