"""
cli_entry.py - CLI Entry Point

Supports:
- Command-line argument mode (list / rename / delete)
- Interactive browse mode
"""

import argparse
import logging
import sys
from pathlib import Path

from core import (
    BrowseError, BrowseOptions, BrowseSession, Change, configure_logging,
    list_suffixes, parse_transform,
)

from .cli_interactive import ask_overwrite, interactive_mode, open_session, print_listing, print_preview


class TransformAction(argparse.Action):
    """Collect transform options in the order they were given"""

    def __call__(self, parser, namespace, values, option_string=None):
        transforms = list(getattr(namespace, self.dest, None) or [])
        args = values if isinstance(values, list) else []
        try:
            transforms.append(parse_transform(self.const, *args))
        except ValueError as e:
            parser.error(f"{option_string}: {e}")
        setattr(namespace, self.dest, transforms)


def add_browse_arguments(parser: argparse.ArgumentParser, defaults: bool = True):
    """
    Add the folder and logging options

    They are accepted before and after the subcommand. Subcommand copies
    are added with defaults=False so they only set what was given there
    and do not reset values given before the subcommand.
    """
    def default(value):
        return value if defaults else argparse.SUPPRESS

    parser.add_argument("--ext", "-e", action="append", metavar="EXT", default=default(None),
                        help="Image extension to include (repeatable, default: common image types)")
    parser.add_argument("--recursive", "-r", action="store_true", default=default(False),
                        help="Include subdirectories")
    parser.add_argument("--hidden", action="store_true", default=default(False), help="Include hidden files")
    parser.add_argument("--no-thumbnails", action="store_true", default=default(False),
                        help="Do not decode previews")
    parser.add_argument("--workers", "-w", type=int, default=default(4), help="Worker threads")
    parser.add_argument("--log-dir", type=str, default=default(None),
                        help="Directory for error and rename result logs")
    parser.add_argument("--verbose", "-v", action="store_true", default=default(False), help="Debug output")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    common = argparse.ArgumentParser(add_help=False)
    add_browse_arguments(common, defaults=False)

    parser = argparse.ArgumentParser(
        prog="slim-browse",
        description="Image Browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  slim-browse
  slim-browse --dir ./photos

  # List images
  slim-browse list ./photos --ext .jpg --ext .png

  # Batch rename, transforms run in the given order
  slim-browse rename ./photos --remove ".realcugan" --add "_hd" --dry-run
  slim-browse rename ./photos --reorder --trim 2 --yes

  # Delete one image (sent to the trash)
  slim-browse delete ./photos 3
"""
    )
    add_browse_arguments(parser)
    parser.add_argument("--dir", "-d", type=str, help="Folder to open in interactive mode")

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # list subcommand
    list_parser = subparsers.add_parser("list", help="List images with their ids", parents=[common])
    list_parser.add_argument("directory", type=str, help="Image directory")

    # rename subcommand
    rename_parser = subparsers.add_parser("rename", help="Batch rename", parents=[common])
    rename_parser.add_argument("directory", type=str, help="Image directory")
    rename_parser.add_argument("--add", dest="transforms", action=TransformAction, const="add",
                               nargs=1, metavar="TOKEN", help="Append TOKEN to the name")
    rename_parser.add_argument("--remove-appendage", dest="transforms", action=TransformAction,
                               const="remove_appendage", nargs=1, metavar="TOKEN",
                               help="Remove TOKEN from the end of the name")
    rename_parser.add_argument("--remove", dest="transforms", action=TransformAction, const="remove",
                               nargs=1, metavar="TOKEN", help="Remove every TOKEN")
    rename_parser.add_argument("--replace", dest="transforms", action=TransformAction, const="replace",
                               nargs=2, metavar=("OLD", "NEW"), help="Replace every OLD with NEW")
    rename_parser.add_argument("--reorder", dest="transforms", action=TransformAction, const="reorder",
                               nargs=0, help="Move the digits to the end of the name")
    rename_parser.add_argument("--trim", dest="transforms", action=TransformAction, const="trim",
                               nargs=1, metavar="N", help="Remove the first N characters")
    rename_parser.add_argument("--overwrite", action="store_true", help="Overwrite existing files without asking")
    rename_parser.add_argument("--dry-run", action="store_true", help="Preview only, do not execute")
    rename_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    # delete subcommand
    delete_parser = subparsers.add_parser("delete", help="Send one image to the trash", parents=[common])
    delete_parser.add_argument("directory", type=str, help="Image directory")
    delete_parser.add_argument("id", type=int, help="Id shown by the list command")

    return parser


def options_from_args(args) -> BrowseOptions:
    """Map command-line flags onto BrowseOptions"""
    kwargs = dict(
        recursive=args.recursive,
        include_hidden=args.hidden,
        thumbnails=not args.no_thumbnails,
        max_workers=args.workers,
        log_dir=Path(args.log_dir) if args.log_dir else None,
    )
    if args.ext:
        kwargs["extensions"] = args.ext
    return BrowseOptions(**kwargs)


def cmd_list(session: BrowseSession, args):
    """Handle list command"""
    directory = Path(args.directory).resolve()
    open_session(session, directory)

    print(f"Directory: {directory}")
    if not len(session.collection):
        suffixes = list_suffixes(directory, include_hidden=args.hidden)
        print("No matching images found")
        if suffixes:
            print(f"Available file suffixes: {', '.join(suffixes)} (use --ext)")
        return 0

    print(f"Found {len(session.collection)} images")
    print("-" * 80)
    print_listing(session)
    print("-" * 80)
    return 0


def cmd_rename(session: BrowseSession, args):
    """Handle rename command"""
    transforms = args.transforms or []
    if not transforms:
        print("Error: No transform given (use --add, --remove, --replace, ...)")
        return 1

    directory = Path(args.directory).resolve()
    open_session(session, directory)
    print(f"Directory: {directory}")
    print(f"Found {len(session.collection)} images")

    rename_session = session.begin_rename()
    for transform in transforms:
        rename_session.apply_transform(transform)

    if not rename_session.pending_items():
        print("No files need renaming")
        return 0

    # Show preview
    print()
    print_preview(rename_session)

    # Confirmation
    if args.dry_run:
        print("\n[Preview mode] Will not actually execute")
        return 0

    if not args.yes:
        confirm = input("\nConfirm execution? (y/N): ").strip().lower()
        if confirm != 'y':
            rename_session.discard()
            print("Cancelled")
            return 0

    confirm_overwrite = (lambda path: True) if args.overwrite else ask_overwrite

    # Execute
    print("\nExecuting...")
    result, _ = session.commit_rename(rename_session, confirm_overwrite=confirm_overwrite)
    print(result.summary())

    return 0 if result.failed_count == 0 else 1


def cmd_delete(session: BrowseSession, args):
    """Handle delete command"""
    directory = Path(args.directory).resolve()
    open_session(session, directory)

    path = session.collection.get(args.id)
    if session.delete(args.id) == Change.NONE:
        print(f"Error: Could not delete {path}")
        return 1

    print(f"Deleted {path.name}")
    return 0


COMMANDS = {
    "list": cmd_list,
    "rename": cmd_rename,
    "delete": cmd_delete,
}


def main(argv=None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_dir=args.log_dir,
    )

    try:
        options = options_from_args(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.command is None:
        # No subcommand, enter interactive mode
        directory = Path(args.dir).expanduser().resolve() if args.dir else None
        return interactive_mode(options, directory)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    with BrowseSession(options) as session:
        try:
            return handler(session, args)
        except BrowseError as e:
            print(f"Error: {e}")
            return 1


if __name__ == "__main__":
    sys.exit(main())
