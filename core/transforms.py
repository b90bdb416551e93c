"""
transforms.py - Rename Transform Kinds

Closed set of candidate-name transforms. User-facing kind strings are parsed
once at the UI boundary with parse_transform(); the engine only ever sees
these dataclasses.
"""

from dataclasses import dataclass
from typing import Union

from .text_match import (
    add_appendage, remove_appendage, replace_part, reorder_numbers,
    trim_prefix, split_name,
)


@dataclass(frozen=True)
class AddAppendage:
    """Append token to the stem, before the extension"""
    token: str

    def apply_stem(self, stem: str) -> str:
        return add_appendage(stem, self.token)


@dataclass(frozen=True)
class RemoveAppendage:
    """Remove a trailing token from the stem"""
    token: str

    def apply_stem(self, stem: str) -> str:
        return remove_appendage(stem, self.token)


@dataclass(frozen=True)
class RemoveSubstring:
    """Remove every occurrence of token"""
    token: str

    def apply_stem(self, stem: str) -> str:
        return replace_part(stem, self.token, "")


@dataclass(frozen=True)
class ReplaceSubstring:
    """Replace every occurrence of token with replacement"""
    token: str
    replacement: str

    def apply_stem(self, stem: str) -> str:
        return replace_part(stem, self.token, self.replacement)


@dataclass(frozen=True)
class ReorderNumbers:
    """Move the digits of the stem to its end"""

    def apply_stem(self, stem: str) -> str:
        return reorder_numbers(stem)


@dataclass(frozen=True)
class TrimPrefixCount:
    """Remove the first count characters of the stem"""
    count: int

    def apply_stem(self, stem: str) -> str:
        return trim_prefix(stem, self.count)


Transform = Union[
    AddAppendage, RemoveAppendage, RemoveSubstring,
    ReplaceSubstring, ReorderNumbers, TrimPrefixCount,
]


def apply_transform(transform: Transform, name: str) -> str:
    """
    Apply a transform to a full file name

    Args:
        transform: Transform to apply
        name: File name including extension

    Returns:
        New file name, or the unchanged name when the transform is a no-op
        or would leave an empty stem
    """
    stem, ext = split_name(name)
    new_stem = transform.apply_stem(stem)
    if not new_stem or new_stem == stem:
        return name
    return f"{new_stem}{ext}"


_KINDS = {
    "add": (AddAppendage, 1),
    "add_appendage": (AddAppendage, 1),
    "remove_appendage": (RemoveAppendage, 1),
    "remove": (RemoveSubstring, 1),
    "remove_substring": (RemoveSubstring, 1),
    "replace": (ReplaceSubstring, 2),
    "replace_substring": (ReplaceSubstring, 2),
    "reorder": (ReorderNumbers, 0),
    "reorder_numbers": (ReorderNumbers, 0),
    "trim": (TrimPrefixCount, 1),
    "trim_prefix": (TrimPrefixCount, 1),
}


def parse_transform(kind: str, *args) -> Transform:
    """
    Parse a user-facing transform name and its arguments

    Args:
        kind: Transform name ("add", "remove_appendage", "replace", ...),
              case-insensitive, "-" and "_" are interchangeable
        *args: Transform arguments as entered by the user

    Returns:
        Transform instance

    Raises:
        ValueError: Unknown kind, wrong argument count or bad number
    """
    key = kind.strip().lower().replace("-", "_")
    if key not in _KINDS:
        raise ValueError(f"Unknown transform: {kind}")

    cls, arity = _KINDS[key]
    if len(args) != arity:
        raise ValueError(f"Transform {kind} expects {arity} argument(s), got {len(args)}")

    if cls is TrimPrefixCount:
        try:
            count = int(args[0])
        except (TypeError, ValueError):
            raise ValueError(f"Transform {kind} expects a number, got {args[0]!r}") from None
        return TrimPrefixCount(count)

    return cls(*(str(a) for a in args))
