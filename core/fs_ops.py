"""
fs_ops.py - Filesystem Primitives

Rename, safe delete (send to trash) and archive unpacking
"""

from pathlib import Path
from typing import Union
import logging
import os
import shutil
import tarfile
import tempfile
import zipfile

from send2trash import send2trash

from .errors import IOFailureError, NotFoundError, error_from_os

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def rename_file(src: PathLike, dst: PathLike) -> bool:
    """
    Rename a file (atomic on the same filesystem)

    Args:
        src: Source path
        dst: Destination path

    Returns:
        True on success

    Raises:
        OSError: Rename failed, the source is left untouched
    """
    os.rename(src, dst)
    return True


def replace_file(src: PathLike, dst: PathLike) -> bool:
    """Rename, overwriting an existing destination"""
    os.replace(src, dst)
    return True


def delete_file(path: PathLike) -> bool:
    """
    Send a file to the trash

    Args:
        path: File to delete

    Returns:
        True if deleted, False if the file was already missing or could not
        be moved to the trash
    """
    path = Path(path)
    if not path.exists():
        return False

    try:
        send2trash(str(path))
    except OSError as e:
        logger.warning("Could not delete %s: %s", path, e)
        return False

    logger.info("Deleted %s", path)
    return True


def unpack_archive(archive: PathLike) -> Path:
    """
    Unpack an archive into a fresh temporary directory

    Args:
        archive: Archive file (any format shutil knows: zip, tar, ...)

    Returns:
        Temporary directory holding the extracted files; the caller removes it

    Raises:
        NotFoundError: Archive does not exist
        IOFailureError: Unknown format or broken archive
    """
    archive = Path(archive)
    if not archive.is_file():
        raise NotFoundError("Archive does not exist", archive)

    target = Path(tempfile.mkdtemp(prefix="slim_browse_"))
    try:
        shutil.unpack_archive(str(archive), str(target))
    except shutil.ReadError as e:
        shutil.rmtree(target, ignore_errors=True)
        raise IOFailureError(f"Unsupported archive format ({e})", archive) from e
    except OSError as e:
        shutil.rmtree(target, ignore_errors=True)
        raise error_from_os(e, archive) from e
    except (zipfile.BadZipFile, tarfile.TarError) as e:
        shutil.rmtree(target, ignore_errors=True)
        raise IOFailureError(f"Cannot unpack archive ({e})", archive) from e

    logger.debug("Unpacked %s into %s", archive, target)
    return target
