"""
plan_rename.py - Rename Preview Module

Responsibilities:
- Snapshot the collection into preview items
- Apply transforms to candidate names (pure, never touches disk)
- Track session state (open / committed / discarded)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List
import logging

from .collection import IndexedCollection
from .errors import SessionClosedError
from .models_fs import ItemStatus, RenamePreviewItem
from .text_match import is_valid_filename
from .transforms import Transform, apply_transform

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Batch rename session state"""
    OPEN = "open"
    COMMITTED = "committed"
    DISCARDED = "discarded"


@dataclass
class PreviewSummary:
    """Counts over the preview items"""
    total: int = 0
    changed: int = 0
    pending: int = 0
    succeeded: int = 0
    failed: int = 0

    def __str__(self) -> str:
        return (f"{self.total} items, {self.changed} to rename, "
                f"{self.succeeded} succeeded, {self.failed} failed")


@dataclass
class RenameSession:
    """Batch rename preview over a collection snapshot"""
    items: List[RenamePreviewItem] = field(default_factory=list)
    state: SessionState = SessionState.OPEN
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def open(cls, collection: IndexedCollection) -> "RenameSession":
        """
        Create a preview item for every entry of the collection

        Args:
            collection: Collection to snapshot

        Returns:
            Open session, items in id order
        """
        items = [RenamePreviewItem.from_path(i, p) for i, p in collection.items()]
        logger.debug("Rename session opened with %d items", len(items))
        return cls(items=items)

    def check_usable(self) -> None:
        if self.state == SessionState.DISCARDED:
            raise SessionClosedError("Rename session was discarded")

    def apply_transform(self, transform: Transform) -> int:
        """
        Apply a transform to every candidate name

        Items whose result is unchanged, empty or not a valid file name keep
        their candidate. A SUCCESS item whose candidate changes becomes
        PENDING again.

        Args:
            transform: Transform to apply

        Returns:
            Number of candidates changed
        """
        self.check_usable()
        changed = 0

        for item in self.items:
            new_name = apply_transform(transform, item.candidate_name)
            if new_name == item.candidate_name:
                continue

            valid, error = is_valid_filename(new_name)
            if not valid:
                self.add_warning(f"Skip {item.original_name}: {error}")
                continue

            item.candidate_name = new_name
            if item.status == ItemStatus.SUCCESS:
                item.status = ItemStatus.PENDING
            changed += 1

        if changed:
            # New edits reopen a committed session
            self.state = SessionState.OPEN
        logger.debug("Applied %s: %d candidates changed", transform, changed)
        return changed

    def get_item(self, item_id: int) -> RenamePreviewItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def reset_candidates(self) -> None:
        """Throw away uncommitted edits"""
        self.check_usable()
        for item in self.items:
            item.candidate_name = item.original_name

    def changed_items(self) -> List[RenamePreviewItem]:
        """Items with a candidate that differs from the committed name"""
        return [item for item in self.items if item.is_changed]

    def pending_items(self) -> List[RenamePreviewItem]:
        """Items the next commit pass will try to rename"""
        return [
            item for item in self.items
            if item.is_changed and item.status != ItemStatus.SUCCESS
        ]

    def failed_items(self) -> List[RenamePreviewItem]:
        return [item for item in self.items if item.status == ItemStatus.FAILED]

    def add_warning(self, msg: str) -> None:
        """Add warning"""
        self.warnings.append(msg)

    def discard(self) -> None:
        """Close the session without touching the disk"""
        self.state = SessionState.DISCARDED

    def mark_committed_if_settled(self) -> None:
        """Committed once nothing is left to rename"""
        if self.state == SessionState.OPEN and not self.pending_items():
            self.state = SessionState.COMMITTED

    def summary(self) -> PreviewSummary:
        """Generate summary"""
        return PreviewSummary(
            total=len(self.items),
            changed=len(self.changed_items()),
            pending=len(self.pending_items()),
            succeeded=sum(1 for i in self.items if i.status == ItemStatus.SUCCESS),
            failed=len(self.failed_items()),
        )
