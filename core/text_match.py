"""
text_match.py - Text Matching Tools

Pure string helpers used by the rename transforms, and file name validation.
All helpers work on a base name (no extension) unless stated otherwise.
"""

from pathlib import Path
from typing import Optional, Tuple

# Separator placed between the text and the digits moved by reorder_numbers()
NUMBER_SEPARATOR = "_"


def split_name(name: str) -> Tuple[str, str]:
    """
    Split a file name into (stem, extension)

    Args:
        name: File name ("img.png")

    Returns:
        ("img", ".png"); extension is empty for names without one
    """
    p = Path(name)
    return p.stem, p.suffix


def add_appendage(stem: str, appendage: str) -> str:
    """Append appendage to the stem (cumulative: applying twice appends twice)"""
    if not appendage:
        return stem
    return stem + appendage


def remove_appendage(stem: str, appendage: str) -> str:
    """Remove a trailing appendage (case-insensitive) if present"""
    if not appendage or not stem.casefold().endswith(appendage.casefold()):
        return stem
    return stem[:-len(appendage)]


def replace_part(stem: str, target: str, update: str) -> str:
    """Replace every occurrence of target, only if it exists"""
    if not target or target not in stem:
        return stem
    return stem.replace(target, update)


def reorder_numbers(stem: str) -> str:
    """
    Move all digits to the end, behind NUMBER_SEPARATOR

    Non-digit characters keep their order. "a1b2" -> "ab_12".
    Idempotent: an already ordered stem ("ab_12") is returned as is.
    Stems without digits, or made only of digits, are unchanged.
    """
    digits = "".join(c for c in stem if c.isdigit())
    if not digits:
        return stem

    non_digits = "".join(c for c in stem if not c.isdigit())
    if not non_digits:
        return stem

    # Avoid doubling a separator that is already there ("ab_12" stays "ab_12")
    non_digits = non_digits.rstrip(NUMBER_SEPARATOR)
    return f"{non_digits}{NUMBER_SEPARATOR}{digits}"


def trim_prefix(stem: str, count: int) -> str:
    """Remove the first count characters; no-op if the stem is not longer than count"""
    if count <= 0 or len(stem) <= count:
        return stem
    return stem[count:]


def is_valid_filename(name: str) -> Tuple[bool, Optional[str]]:
    """
    Check if filename is valid (mainly for Windows)

    Args:
        name: Filename

    Returns:
        (is_valid, error_reason)
    """
    if not name:
        return False, "Filename cannot be empty"

    # Windows invalid characters
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        if char in name:
            return False, f"Filename contains invalid character: {char}"

    if any(ord(c) < 32 for c in name):
        return False, "Filename contains control characters"

    # Trailing space or dot
    if name.endswith(' ') or name.endswith('.'):
        return False, "Filename cannot end with space or dot"

    # Windows reserved names
    reserved_names = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }
    name_upper = name.upper().split('.')[0]
    if name_upper in reserved_names:
        return False, f"Filename is a Windows reserved name: {name_upper}"

    if len(name) > 255:
        return False, "Filename exceeds 255 characters"

    return True, None
