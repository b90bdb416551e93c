"""
scan_files.py - File Scanning Module

Builds the sorted list of eligible file paths for a directory (PathCatalog),
recursive or not, filtered by extension
"""

from pathlib import Path
from typing import Iterable, List, Union
import logging
import os

from .errors import AccessDeniedError, NotFoundError, error_from_os
from .models_fs import PathEntry, normalize_extensions
from .sort_rules import sort_paths

logger = logging.getLogger(__name__)


def _check_root(root: Union[str, Path]) -> Path:
    """Resolve root directory, raising NotFound/AccessDenied"""
    root = Path(root).expanduser()
    try:
        root = root.resolve()
    except OSError as e:
        raise error_from_os(e, root) from e

    if not root.exists():
        raise NotFoundError("Directory does not exist", root)
    if not root.is_dir():
        raise NotFoundError("Not a directory", root)
    if not os.access(root, os.R_OK | os.X_OK):
        raise AccessDeniedError("Directory is not readable", root)
    return root


def scan_catalog(
    root: Union[str, Path],
    extensions: Iterable[str],
    recursive: bool = False,
    include_hidden: bool = False,
) -> List[Path]:
    """
    Scan directory for files with one of the given extensions

    Args:
        root: Root directory
        extensions: Case-insensitive suffixes (".png" or "png")
        recursive: Whether to traverse subdirectories
        include_hidden: Whether to include hidden files

    Returns:
        Paths in natural sort order (empty list if nothing matches)

    Raises:
        ValueError: extensions is empty
        NotFoundError: root does not exist
        AccessDeniedError: root cannot be listed
    """
    suffixes = normalize_extensions(extensions)
    if not suffixes:
        raise ValueError("At least one file extension is required")

    root = _check_root(root)
    results: List[Path] = []

    if recursive:
        def on_error(e: OSError):
            # The root must not be skipped silently
            if Path(e.filename or "") == root:
                raise error_from_os(e, root) from e
            logger.warning("Skipping unreadable directory %s: %s", e.filename, e.strerror)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            # Modifying dirnames in place prevents os.walk from entering hidden directories
            if not include_hidden:
                dirnames[:] = [d for d in dirnames if not d.startswith('.')]

            for filename in filenames:
                if not include_hidden and filename.startswith('.'):
                    continue
                entry = PathEntry(Path(dirpath) / filename)
                if entry.extension in suffixes:
                    results.append(entry.path)
    else:
        try:
            with os.scandir(root) as it:
                for item in it:
                    if not include_hidden and item.name.startswith('.'):
                        continue
                    try:
                        if not item.is_file():
                            continue
                    except OSError:
                        continue
                    entry = PathEntry(Path(item.path))
                    if entry.extension in suffixes:
                        results.append(entry.path)
        except OSError as e:
            raise error_from_os(e, root) from e

    logger.debug("Scanned %s: %d matching files", root, len(results))
    return sort_paths(results)


def list_suffixes(directory: Union[str, Path], include_hidden: bool = False) -> List[str]:
    """
    List all file suffixes in the directory

    Args:
        directory: Target directory
        include_hidden: Whether to include hidden files

    Returns:
        Suffix list (deduplicated, sorted)
    """
    directory = Path(directory).resolve()
    if not directory.is_dir():
        return []

    suffixes = set()
    for item in directory.iterdir():
        if item.is_file():
            if not include_hidden and item.name.startswith('.'):
                continue
            if item.suffix:
                suffixes.add(item.suffix.lower())

    return sorted(suffixes)

