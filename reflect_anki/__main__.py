"""
CLI entry point.

Usage:
    python -m reflect_anki                          (move latest export from ~/Downloads, then sync)
    python -m reflect_anki <export.csv>             (sync a specific export)
    python -m reflect_anki --deck "Spanish"
    python -m reflect_anki --source ~/Desktop --destination dumps
    python -m reflect_anki <export.csv> --synced-at state/.synced_at
    python -m reflect_anki <export.csv> --dry-run
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import (
    find_latest_export,
    get_deck_name,
    get_destination_dir,
    get_export_pattern,
    get_source_dir,
    get_synced_at_path,
    move_latest_export,
)
from .exporter import print_import_instructions
from .sync import sync_export
from .watermark import format_timestamp


def _print_banner(target: str, deck_name: str, synced_at_path: Path, dry_run: bool) -> None:
    """Print a startup banner with run configuration."""
    print()
    print("=" * 60)
    print(f"  Reflect → Anki Exporter v{__version__}")
    print("=" * 60)
    print(f"  Export:     {target}")
    print(f"  Deck:       {deck_name}")
    print(f"  Watermark:  {synced_at_path}")
    if dry_run:
        print(f"  Dry run:    YES (no files will be created or updated)")
    print("=" * 60)
    print()


def _print_summary(result) -> None:
    """Print a summary of the sync run."""
    print()
    print("--- Sync Summary ---")
    print(f"  Rows:                {result.rows_seen}")
    print(f"  Edited since sync:   {result.rows_processed}")
    print(f"  Cards:               {len(result.lines)}")
    if result.duplicate_cloze:
        print(f"  Duplicate cloze:     {result.duplicate_cloze}")
    if result.unmatched_patterns:
        print(f"  Unmatched patterns:  {result.unmatched_patterns}")
    if result.invalid_timestamps:
        print(f"  Invalid timestamps:  {result.invalid_timestamps}")
    print(f"  Previous watermark:  {format_timestamp(result.previous_watermark)}")
    print(f"  New watermark:       {format_timestamp(result.new_watermark)}")
    print()


def run(csv_path: str, deck_name: str, synced_at_path: Path, dry_run: bool) -> None:
    """Sync a single Reflect export file."""
    _print_banner(csv_path, deck_name, synced_at_path, dry_run)

    try:
        result = sync_export(csv_path, deck_name, synced_at_path, dry_run=dry_run)
    except (FileNotFoundError, ValueError) as e:
        print(f"[error] {e}")
        sys.exit(1)

    _print_summary(result)

    if result.written:
        print_import_instructions(result.output_path)

    print()
    print("=" * 60)
    print("  Pipeline complete!")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(
        prog="reflect_anki",
        description="Export #spaced/#reversed/#type/#cloze bullets from Reflect CSV exports to an Anki import file",
    )
    parser.add_argument(
        "path",
        nargs="?",
        help="Path to a Reflect CSV export (default: move the latest one from the source folder)",
    )
    parser.add_argument(
        "--deck",
        help="Anki deck name for every card (saved after first use, default: Reflect)",
        default=None,
    )
    parser.add_argument(
        "--source",
        help="Folder Reflect exports are downloaded to (saved after first use, default: ~/Downloads)",
        default=None,
    )
    parser.add_argument(
        "--destination",
        help="Folder exports are moved into before syncing (saved after first use, default: reflect-dumps)",
        default=None,
    )
    parser.add_argument(
        "--pattern",
        help="Glob for export file names in the source folder (default: reflect-*.csv)",
        default=None,
    )
    parser.add_argument(
        "--synced-at",
        help="Path to the watermark file (saved after first use, default: .synced_at)",
        default=None,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview the cards without writing the import file or updating the watermark",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()
    deck_name = get_deck_name(args.deck)
    synced_at_path = get_synced_at_path(args.synced_at)

    if args.path:
        target = Path(args.path)
        if not target.is_file():
            print(f"[error] '{args.path}' is not a valid file.")
            sys.exit(1)
        run(args.path, deck_name, synced_at_path, dry_run=args.dry_run)
        return

    source_dir = get_source_dir(args.source)
    destination_dir = get_destination_dir(args.destination)
    pattern = get_export_pattern(args.pattern)
    print(f"[config] Source directory: {source_dir}")
    print(f"[config] Destination directory: {destination_dir}")

    if args.dry_run:
        print("[config] [DRY RUN] Export is not moved; syncing it in place")
        csv_path = find_latest_export(source_dir, pattern)
    else:
        csv_path = move_latest_export(source_dir, destination_dir, pattern)

    if csv_path is None:
        print("[main] Nothing to sync.")
        return

    run(str(csv_path), deck_name, synced_at_path, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
