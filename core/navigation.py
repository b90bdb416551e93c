"""
navigation.py - Navigation Cursor

Tracks the current id within a collection and computes next/previous
targets and edge-of-collection flags. Boundary-stop, no wraparound.
"""

from typing import List, Sequence, Tuple

from .errors import InvalidIdError

NO_SELECTION = -1


class NavigationCursor:
    """Current position within the sorted id sequence"""

    def __init__(self, total: int = 0):
        self.current_id: int = NO_SELECTION
        self.total: int = total

    def reset(self, total: int) -> None:
        """Clear the selection after the collection was replaced"""
        self.current_id = NO_SELECTION
        self.total = total

    def _index(self, ids: Sequence[int]) -> int:
        """Position of current_id in ids (-1 for no selection)"""
        if self.current_id == NO_SELECTION:
            return -1
        try:
            return list(ids).index(self.current_id)
        except ValueError:
            raise InvalidIdError(self.current_id) from None

    def select(self, item_id: int, ids: Sequence[int]) -> int:
        """
        Move to an id

        Args:
            item_id: Id to select, or -1 to clear the selection
            ids: Sorted ids of the collection

        Returns:
            The selected id

        Raises:
            InvalidIdError: item_id is not in ids
        """
        if item_id != NO_SELECTION and item_id not in ids:
            raise InvalidIdError(item_id)
        self.current_id = item_id
        self.total = len(ids)
        return item_id

    def next(self, ids: Sequence[int]) -> int:
        """
        Move to the id following current_id

        Stays on the last id; from no selection the first id is taken.
        """
        self.total = len(ids)
        if not ids:
            self.current_id = NO_SELECTION
            return self.current_id

        index = self._index(ids)
        if index == -1:
            self.current_id = ids[0]
        elif index < len(ids) - 1:
            self.current_id = ids[index + 1]
        return self.current_id

    def previous(self, ids: Sequence[int]) -> int:
        """
        Move to the id preceding current_id

        Stays on the first id; from no selection the last id is taken.
        """
        self.total = len(ids)
        if not ids:
            self.current_id = NO_SELECTION
            return self.current_id

        index = self._index(ids)
        if index == -1:
            self.current_id = ids[-1]
        elif index > 0:
            self.current_id = ids[index - 1]
        return self.current_id

    def fallback_after_removal(self, removed_id: int, ids_before: List[int]) -> int:
        """
        Move off an id that was just removed

        Takes the id that followed it in the previous order, else the one
        before it, else clears the selection.

        Args:
            removed_id: Id that no longer exists
            ids_before: Sorted ids as they were before the removal

        Returns:
            New current id
        """
        remaining = [i for i in ids_before if i != removed_id]
        self.total = len(remaining)

        if removed_id not in ids_before:
            if self.current_id not in remaining:
                self.current_id = NO_SELECTION
            return self.current_id
        if self.current_id != removed_id and self.current_id in remaining:
            return self.current_id

        index = ids_before.index(removed_id)
        if index + 1 < len(ids_before):
            self.current_id = ids_before[index + 1]
        elif index > 0:
            self.current_id = ids_before[index - 1]
        else:
            self.current_id = NO_SELECTION
        return self.current_id

    def compute_edge_flags(self, ids: Sequence[int]) -> Tuple[bool, bool]:
        return compute_edge_flags(self.current_id, ids)


def compute_edge_flags(current_id: int, ids: Sequence[int]) -> Tuple[bool, bool]:
    """
    Compute (has_previous, has_next) for UI enablement

    Args:
        current_id: Current id (-1 for no selection)
        ids: Sorted ids of the collection

    Returns:
        Both False when the collection has one entry or none

    Raises:
        InvalidIdError: current_id is neither -1 nor in ids
    """
    if current_id != NO_SELECTION and current_id not in ids:
        raise InvalidIdError(current_id)
    if len(ids) <= 1:
        return False, False
    return current_id > ids[0], current_id < ids[-1]
