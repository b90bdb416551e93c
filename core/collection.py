"""
collection.py - Indexed File Collection

Stable integer ids for an ordered list of paths. The id -> path mapping is
the single source of truth for navigation, thumbnails and rename.
"""

from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import NotFoundError


class IndexedCollection:
    """
    Id -> path mapping for the files currently being browsed

    Ids are dense from 0 in scan order, never reused, and survive renames.
    Not synchronised: one writer at a time.
    """

    def __init__(self, entries: Optional[Dict[int, Path]] = None):
        self._entries: Dict[int, Path] = dict(entries) if entries else {}

    @classmethod
    def build(cls, paths: Iterable[Path]) -> "IndexedCollection":
        """
        Assign ids 0..n-1 in input order

        Args:
            paths: Ordered paths (normally a scan result)

        Returns:
            New collection
        """
        return cls({i: Path(p) for i, p in enumerate(paths)})

    def get(self, item_id: int) -> Path:
        try:
            return self._entries[item_id]
        except KeyError:
            raise NotFoundError(f"No entry with id {item_id}") from None

    def remove(self, item_id: int) -> Path:
        """Delete the mapping (remaining ids are not renumbered)"""
        try:
            return self._entries.pop(item_id)
        except KeyError:
            raise NotFoundError(f"No entry with id {item_id}") from None

    def update(self, item_id: int, new_path: Path) -> None:
        """Replace the path for an existing id"""
        if item_id not in self._entries:
            raise NotFoundError(f"No entry with id {item_id}")
        self._entries[item_id] = Path(new_path)

    def ids(self) -> List[int]:
        """Ids in ascending (navigation) order"""
        return sorted(self._entries)

    def items(self) -> List[Tuple[int, Path]]:
        return [(i, self._entries[i]) for i in self.ids()]

    def find(self, path: Path) -> Optional[int]:
        """Id of the given path, or None"""
        path = Path(path)
        for item_id, p in self._entries.items():
            if p == path:
                return item_id
        return None

    def snapshot(self) -> Dict[int, Path]:
        """Copy of the current mapping"""
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id) -> bool:
        return item_id in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self.ids())

    def __repr__(self) -> str:
        return f"IndexedCollection({len(self._entries)} entries)"
