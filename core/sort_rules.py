"""
sort_rules.py - Sorting Rules Module

Provides the natural, name-aware ordering used for collections
("img2" sorts before "img10")
"""

from pathlib import Path
from typing import Iterable, List

from natsort import natsort_keygen, ns


# PATH splits on separators and suffixes so "a.png" sorts before "a_1.png";
# IGNORECASE keeps "B.png" next to "b.png"
_PATH_KEY = natsort_keygen(alg=ns.PATH | ns.IGNORECASE)


def sort_paths(paths: Iterable[Path]) -> List[Path]:
    """
    Sort paths in natural order

    Ties between names differing only in case are broken by the raw path,
    so the order is total.

    Args:
        paths: Paths to sort

    Returns:
        Sorted path list (new list)
    """
    return sorted((Path(p) for p in paths), key=lambda p: (_PATH_KEY(str(p)), str(p)))
