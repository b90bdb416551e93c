"""
errors.py - Error Taxonomy

Shared exception types for scanning, navigation and renaming
"""

import errno
from pathlib import Path
from typing import Optional, Union


class BrowseError(Exception):
    """Base class for all browser core errors"""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message}: {self.path}"
        return self.message


class NotFoundError(BrowseError, LookupError):
    """Path, directory or id missing"""


class AccessDeniedError(BrowseError):
    """Permission failure during scan or rename"""


class ConflictError(BrowseError):
    """Rename target already occupied"""


class IOFailureError(BrowseError):
    """Generic I/O error during rename or delete"""


class InvalidIdError(BrowseError, LookupError):
    """Caller referenced an id that is not in the current collection"""

    def __init__(self, item_id: int):
        super().__init__(f"Id is not part of the collection: {item_id}")
        self.item_id = item_id


class SessionClosedError(BrowseError):
    """Operation on a rename session that was already discarded"""


def error_from_os(exc: OSError, path: Optional[Union[str, Path]] = None) -> BrowseError:
    """
    Map an OSError onto the error taxonomy

    Args:
        exc: Original OS error
        path: Path the operation was working on (falls back to exc.filename)

    Returns:
        Matching BrowseError instance (original exception chained as __cause__)
    """
    if path is None and exc.filename:
        path = exc.filename

    message = exc.strerror or str(exc) or exc.__class__.__name__

    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        err: BrowseError = AccessDeniedError(message, path)
    elif isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
        err = NotFoundError(message, path)
    elif isinstance(exc, FileExistsError) or exc.errno == errno.EEXIST:
        err = ConflictError(message, path)
    else:
        err = IOFailureError(message, path)

    err.__cause__ = exc
    return err


def unexpected_error(exc: Exception, path: Optional[Union[str, Path]] = None) -> BrowseError:
    """Wrap an exception outside the taxonomy (e.g. from an injected primitive) as IOFailureError"""
    err = IOFailureError(str(exc) or exc.__class__.__name__, path)
    err.__cause__ = exc
    return err
