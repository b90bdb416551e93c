"""
safety_checks.py - Safety Check Module

Pre-flight checks run before each rename of a commit pass
"""

from pathlib import Path
from typing import Tuple, Optional
import os
import platform

from .errors import AccessDeniedError, BrowseError, IOFailureError, NotFoundError
from .text_match import is_valid_filename


def check_writable(path: Path) -> Tuple[bool, Optional[str]]:
    """
    Check if path is writable

    Args:
        path: Path to check

    Returns:
        (is_writable, error_reason)
    """
    if path.exists():
        # A rename needs write access to the containing directory
        if not os.access(path.parent, os.W_OK):
            return False, f"Directory is not writable: {path.parent}"
    else:
        # File doesn't exist, check if parent directory is writable
        parent = path.parent
        if not parent.exists():
            return False, f"Parent directory does not exist: {parent}"
        if not os.access(parent, os.W_OK):
            return False, f"Directory is not writable: {parent}"

    return True, None


def check_path_length(path: Path, max_length: int = 260) -> Tuple[bool, Optional[str]]:
    """
    Check if path length exceeds limit (mainly for Windows)

    Args:
        path: Path to check
        max_length: Maximum length

    Returns:
        (is_valid, error_reason)
    """
    path_str = str(path)
    if len(path_str) > max_length:
        return False, f"Path length ({len(path_str)}) exceeds limit ({max_length}): {path}"
    return True, None


def check_rename_op(src: Path, dst: Path) -> Optional[BrowseError]:
    """
    Check if a single rename operation is safe

    Args:
        src: Source path
        dst: Destination path

    Returns:
        None when safe, otherwise the error to record for the item
    """
    if not src.exists():
        return NotFoundError("Source file does not exist", src)

    if not src.is_file():
        return IOFailureError("Source path is not a file", src)

    valid, error = is_valid_filename(dst.name)
    if not valid:
        return IOFailureError(error, dst)

    if platform.system() == "Windows":
        valid, error = check_path_length(dst)
        if not valid:
            return IOFailureError(error, dst)

    valid, error = check_writable(src)
    if not valid:
        return AccessDeniedError(error, src)

    return None


def is_same_file(path1: Path, path2: Path) -> bool:
    """
    Check if two paths point at the same file (e.g. case-only change on a
    case-insensitive filesystem)

    Args:
        path1: Path 1
        path2: Path 2

    Returns:
        Whether both exist and are the same file
    """
    try:
        return os.path.samefile(path1, path2)
    except OSError:
        return False
