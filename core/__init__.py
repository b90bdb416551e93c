"""
core - Image Browser Core Module

Provides the indexed file collection, navigation cursor, thumbnail
materializer and the two-phase batch rename engine.
"""

from .models_fs import (
    DEFAULT_EXTENSIONS,
    BrowseOptions,
    Change,
    ItemStatus,
    PathEntry,
    RenamePreviewItem,
    ThumbnailEntry,
    ThumbnailStatus,
)

from .errors import (
    BrowseError,
    NotFoundError,
    AccessDeniedError,
    ConflictError,
    IOFailureError,
    InvalidIdError,
    SessionClosedError,
)

from .scan_files import (
    scan_catalog,
    list_suffixes,
)

from .sort_rules import (
    sort_paths,
)

from .collection import IndexedCollection

from .navigation import (
    NO_SELECTION,
    NavigationCursor,
    compute_edge_flags,
)

from .transforms import (
    AddAppendage,
    RemoveAppendage,
    RemoveSubstring,
    ReplaceSubstring,
    ReorderNumbers,
    TrimPrefixCount,
    apply_transform,
    parse_transform,
)

from .text_match import is_valid_filename

from .plan_rename import (
    RenameSession,
    SessionState,
    PreviewSummary,
)

from .exec_rename import (
    apply_renames,
    apply_async,
    rename_entry,
    RenameResult,
)

from .thumbnails import (
    ThumbnailMaterializer,
    MaterializeResult,
    decode_thumbnail,
)

from .fs_ops import (
    delete_file,
    unpack_archive,
)

from .session import BrowseSession
from .log_setup import configure_logging

__all__ = [
    # Data models
    "DEFAULT_EXTENSIONS",
    "BrowseOptions",
    "Change",
    "ItemStatus",
    "PathEntry",
    "RenamePreviewItem",
    "ThumbnailEntry",
    "ThumbnailStatus",

    # Errors
    "BrowseError",
    "NotFoundError",
    "AccessDeniedError",
    "ConflictError",
    "IOFailureError",
    "InvalidIdError",
    "SessionClosedError",

    # Scanning
    "scan_catalog",
    "list_suffixes",

    # Sorting
    "sort_paths",

    # Collection and navigation
    "IndexedCollection",
    "NO_SELECTION",
    "NavigationCursor",
    "compute_edge_flags",

    # Transforms
    "AddAppendage",
    "RemoveAppendage",
    "RemoveSubstring",
    "ReplaceSubstring",
    "ReorderNumbers",
    "TrimPrefixCount",
    "apply_transform",
    "parse_transform",
    "is_valid_filename",

    # Planning
    "RenameSession",
    "SessionState",
    "PreviewSummary",

    # Execution
    "apply_renames",
    "apply_async",
    "rename_entry",
    "RenameResult",

    # Thumbnails
    "ThumbnailMaterializer",
    "MaterializeResult",
    "decode_thumbnail",

    # Filesystem
    "delete_file",
    "unpack_archive",

    # Session
    "BrowseSession",
    "configure_logging",
]
