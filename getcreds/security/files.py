"""
Atomic file writes for key and certificate material.
"""
import os
import tempfile
import logging


logger = logging.getLogger(__name__)


def stage_file(path: str, data: bytes, mode: int) -> str:
    """
    Write data to a temporary file next to path.

    The temporary file is created owner-only and switched to ``mode`` before
    any bytes are written, then flushed and fsynced.

    Args:
        path: Final destination the staged file will be renamed to
        data: File contents
        mode: Permission bits for the final file

    Returns:
        Path of the staged temporary file

    Raises:
        OSError: If the file cannot be created or written
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(
        dir=directory,
        prefix=f".{os.path.basename(path)}.",
        suffix=".tmp"
    )
    try:
        os.fchmod(fd, mode)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        discard(tmp_path)
        raise
    return tmp_path


def discard(tmp_path: str) -> None:
    """Remove a staged file, ignoring one that is already gone."""
    try:
        os.unlink(tmp_path)
    except FileNotFoundError:
        pass


def atomic_write(path: str, data: bytes, mode: int = 0o644) -> None:
    """Replace path with data so readers see either the old or the new file."""
    tmp_path = stage_file(path, data, mode)
    try:
        os.replace(tmp_path, path)
    except BaseException:
        discard(tmp_path)
        raise
    logger.debug(f"Wrote {len(data)} bytes to {path} (mode {oct(mode)})")
