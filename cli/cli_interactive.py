"""
cli_interactive.py - Interactive CLI

Provides a keyboard-driven browse loop over one folder
"""

from pathlib import Path
from typing import List, Optional

from core import (
    BrowseError, BrowseOptions, BrowseSession, Change, RenameSession,
    is_valid_filename, parse_transform,
)

PREVIEW_LIMIT = 20


def print_header(title: str):
    """Print header"""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)
    print()


def input_directory(prompt: str = "Please enter directory path") -> Optional[Path]:
    """Input and validate directory"""
    while True:
        path_str = input(f"{prompt} (q to return): ").strip()
        if path_str.lower() == 'q':
            return None

        path = Path(path_str).expanduser().resolve()
        if path.is_dir():
            return path
        else:
            print(f"Error: Directory does not exist: {path}")


def input_bool(prompt: str, default: bool = False) -> bool:
    """Input boolean value"""
    default_str = "Y/n" if default else "y/N"
    value = input(f"{prompt} ({default_str}): ").strip().lower()
    if not value:
        return default
    return value == 'y'


def input_int(prompt: str) -> Optional[int]:
    """Input integer, empty input returns None"""
    while True:
        value = input(f"{prompt}: ").strip()
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            print("Please enter a valid integer")


def ask_overwrite(path: Path) -> bool:
    """Overwrite prompt used by rename commits"""
    return input_bool(f"{path.name} already exists, overwrite", default=False)


def print_preview(rename_session: RenameSession, limit: int = PREVIEW_LIMIT):
    """Print the pending renames of a preview"""
    pending = rename_session.pending_items()
    print(f"Will perform {len(pending)} rename operations:")
    print("-" * 70)
    for item in pending[:limit]:
        print(f"  {item.original_name:<30} -> {item.candidate_name}")
    if len(pending) > limit:
        print(f"  ... and {len(pending) - limit} more operations")
    print("-" * 70)

    if rename_session.warnings:
        print("Warnings:")
        for warn in rename_session.warnings:
            print(f"  - {warn}")


def print_listing(session: BrowseSession):
    """Print every id of the collection, marking the current one"""
    if not len(session.collection):
        print("No images in this folder")
        return
    for item_id, path in session.collection.items():
        marker = "*" if item_id == session.cursor.current_id else " "
        entry = session.thumbnails.get(item_id)
        detail = ""
        if entry is not None:
            detail = f"  {entry.size[0]}x{entry.size[1]}" if entry.ok else f"  ({entry.error})"
        print(f"{marker} {item_id:>4}  {path.name}{detail}")


def print_current(session: BrowseSession):
    """Print the selected entry and where navigation can go"""
    path = session.current_path()
    if path is None:
        print(f"\n[{len(session.collection)} images, none selected]")
        return

    ids = session.ids()
    position = ids.index(session.cursor.current_id) + 1
    has_previous, has_next = session.edge_flags()
    arrows = ("<" if has_previous else " ") + " " + (">" if has_next else " ")

    entry = session.current_thumbnail()
    detail = ""
    if entry is not None:
        detail = f"  {entry.size[0]}x{entry.size[1]}" if entry.ok else f"  (preview failed: {entry.error})"
    print(f"\n{arrows}  [{position}/{len(ids)}] #{session.cursor.current_id} {path.name}{detail}")


def read_transforms() -> List:
    """Read transforms line by line until an empty line"""
    print("Transforms, one per line, empty line to finish:")
    print("  add TOKEN | remove-appendage TOKEN | remove TOKEN")
    print("  replace OLD NEW | reorder | trim N")
    transforms = []
    while True:
        line = input("> ").strip()
        if not line:
            return transforms
        kind, *args = line.split()
        try:
            transforms.append(parse_transform(kind, *args))
        except ValueError as e:
            print(f"Error: {e}")


def menu_batch_rename(session: BrowseSession):
    """Batch rename menu"""
    print_header("Batch Rename")

    transforms = read_transforms()
    if not transforms:
        print("Cancelled")
        return

    rename_session = session.begin_rename()
    for transform in transforms:
        rename_session.apply_transform(transform)

    if not rename_session.pending_items():
        print("No files need renaming")
        return

    print()
    print_preview(rename_session)

    # Confirm execution
    print()
    if not input_bool("Confirm execution", default=False):
        rename_session.discard()
        print("Cancelled")
        return

    print("\nExecuting...")
    result, _ = session.commit_rename(rename_session, confirm_overwrite=ask_overwrite)
    print()
    print(result.summary())


def rename_current(session: BrowseSession):
    """Rename the selected file"""
    path = session.current_path()
    if path is None:
        print("No file selected")
        return

    new_name = input(f"New name for {path.name} (empty to cancel): ").strip()
    if not new_name:
        return
    valid, error = is_valid_filename(new_name)
    if not valid:
        print(f"Error: {error}")
        return

    try:
        session.rename_current(new_name, confirm_overwrite=ask_overwrite)
    except BrowseError as e:
        print(f"Error: {e}")
        return
    print(f"Renamed to {session.current_path().name}")


def delete_current(session: BrowseSession):
    """Send the selected file to the trash"""
    path = session.current_path()
    if path is None:
        print("No file selected")
        return
    if not input_bool(f"Delete {path.name}", default=False):
        return
    if session.delete_current() == Change.NONE:
        print(f"Error: Could not delete {path.name}")


def goto_id(session: BrowseSession):
    """Select an id"""
    item_id = input_int("Go to id (empty to cancel)")
    if item_id is None:
        return
    try:
        session.select(item_id)
    except BrowseError as e:
        print(f"Error: {e}")


def open_session(session: BrowseSession, directory: Path) -> None:
    """
    Load a folder into the session and wait for it

    Raises:
        BrowseError: Folder could not be scanned
    """
    session.open_folder(directory)
    result = session.wait()
    if result is not None and result.error is not None:
        raise result.error


def interactive_mode(options: Optional[BrowseOptions] = None, directory: Optional[Path] = None) -> int:
    """Interactive mode main loop"""
    print_header("Image Browser")

    if directory is None:
        directory = input_directory("Please enter image directory")
        if directory is None:
            return 0

    with BrowseSession(options) as session:
        try:
            open_session(session, directory)
        except BrowseError as e:
            print(f"Error: {e}")
            return 1

        print(f"Loaded {len(session.collection)} images from {directory}")
        if len(session.collection):
            session.next()

        while True:
            print_current(session)
            choice = input("[n]ext [p]revious [g]oto [d]elete [r]ename [b]atch [l]ist [q]uit: ").strip().lower()

            if choice == 'q':
                print("Goodbye!")
                return 0
            elif choice == 'n':
                if session.next() == Change.NONE:
                    print("Already at the last image")
            elif choice == 'p':
                if session.previous() == Change.NONE:
                    print("Already at the first image")
            elif choice == 'g':
                goto_id(session)
            elif choice == 'd':
                delete_current(session)
            elif choice == 'r':
                rename_current(session)
            elif choice == 'b':
                menu_batch_rename(session)
            elif choice == 'l':
                print_listing(session)
            else:
                print("Invalid choice")
