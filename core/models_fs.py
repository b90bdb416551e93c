"""
models_fs.py - Core Data Structure Definitions

Contains:
- PathEntry: Scanned file path with derived fields
- ThumbnailStatus / ItemStatus: Status enumerations
- ThumbnailEntry: Display-ready preview for one id
- RenamePreviewItem: Proposed rename for one collection entry
- BrowseOptions: Browsing and renaming options configuration
- Change: What a session operation changed
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Set, Tuple
from enum import Enum, Flag, auto
import platform

from .errors import BrowseError


DEFAULT_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp", ".ico",
})


class ThumbnailStatus(Enum):
    """Aggregate state of the thumbnail materializer"""
    IDLE = "idle"
    LOADING = "loading"      # Busy indicator on
    READY = "ready"
    ERROR = "error"


class ItemStatus(Enum):
    """Commit status of a single preview item"""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class Change(Flag):
    """Changes reported back to the UI adapter"""
    NONE = 0
    COLLECTION = auto()
    CURSOR = auto()
    BATCH_STATUS = auto()


@dataclass(frozen=True)
class PathEntry:
    """File path with derived name fields"""
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        """Lower-cased suffix including the dot (empty if none)"""
        return self.path.suffix.lower()

    @classmethod
    def from_path(cls, p) -> "PathEntry":
        """Create PathEntry from a path-like object"""
        return cls(path=Path(p))


@dataclass
class ThumbnailEntry:
    """Display-ready preview for one id"""
    id: int
    path: Path
    size: Optional[Tuple[int, int]] = None    # Decoded preview size (width, height)
    error: Optional[str] = None               # Decode failure for this item only

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RenamePreviewItem:
    """Proposed (uncommitted) rename for one collection entry"""
    id: int
    original_path: Path
    original_name: str
    candidate_name: str
    status: ItemStatus = ItemStatus.PENDING
    error: Optional[BrowseError] = None       # Error of the last failed attempt

    @classmethod
    def from_path(cls, item_id: int, p: Path) -> "RenamePreviewItem":
        entry = PathEntry.from_path(p)
        return cls(id=item_id, original_path=entry.path, original_name=entry.name, candidate_name=entry.name)

    @property
    def is_changed(self) -> bool:
        """Whether the candidate differs from the last committed name"""
        return self.candidate_name != self.original_name

    @property
    def target_path(self) -> Path:
        """Path the item would be renamed to (same directory)"""
        return self.original_path.parent / self.candidate_name

    def mark_success(self, new_path: Path) -> None:
        """Settle the item on its new path"""
        self.original_path = new_path
        self.original_name = new_path.name
        self.candidate_name = new_path.name
        self.status = ItemStatus.SUCCESS
        self.error = None

    def mark_failed(self, error: BrowseError) -> None:
        self.status = ItemStatus.FAILED
        self.error = error


def normalize_extensions(extensions: Iterable[str]) -> Set[str]:
    """Lower-case extensions and make sure they carry the leading dot"""
    result = set()
    for ext in extensions:
        if not ext:
            continue
        ext = ext.lower()
        result.add(ext if ext.startswith(".") else f".{ext}")
    return result


@dataclass
class BrowseOptions:
    """Browsing and renaming options configuration"""
    # Scanning
    extensions: Set[str] = field(default_factory=lambda: set(DEFAULT_EXTENSIONS))
    recursive: bool = False         # Include subdirectories
    include_hidden: bool = False    # Whether to include hidden files

    # Thumbnails ("thumbnails visible" flag)
    thumbnails: bool = True
    thumbnail_size: Tuple[int, int] = (128, 128)

    # Workers for thumbnail decoding and concurrent renames
    max_workers: int = 4

    # Case-sensitive detection (Windows/macOS default to insensitive)
    case_insensitive_detect: bool = field(default_factory=lambda: platform.system() in ("Windows", "Darwin"))

    # Rename result logs (None disables them)
    log_dir: Optional[Path] = None

    def __post_init__(self):
        self.extensions = normalize_extensions(self.extensions)
        if not self.extensions:
            raise ValueError("At least one file extension is required")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
