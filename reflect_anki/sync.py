"""
Incremental sync of a Reflect CSV export into an Anki import file.

Reads the export rows, keeps only those edited after the last sync,
extracts flashcards from their documents, writes the .txt import file
and advances the .synced_at watermark.
"""

from __future__ import annotations

import csv
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from . import watermark
from .exporter import format_card, output_path_for, write_import_file
from .parser import PatternKind, extract_items

# Reflect documents easily exceed csv's default 128 KiB field limit
csv.field_size_limit(min(sys.maxsize, 2**31 - 1))


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExportRow:
    """One row of a Reflect CSV export."""
    id: str
    edited_at: str | None
    document_html: str | None


@dataclass
class SyncResult:
    previous_watermark: datetime
    new_watermark: datetime
    lines: list[str] = field(default_factory=list)
    rows_seen: int = 0
    rows_processed: int = 0
    rows_skipped: int = 0
    invalid_timestamps: int = 0
    unmatched_patterns: int = 0
    duplicate_cloze: int = 0
    csv_path: Path | None = None
    output_path: Path | None = None
    written: bool = False


# ---------------------------------------------------------------------------
# CSV reading
# ---------------------------------------------------------------------------

def read_rows(csv_path: str | Path) -> Iterator[ExportRow]:
    """Yield the rows of a Reflect export. Empty cells come back as None."""
    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        for record in csv.DictReader(f):
            yield ExportRow(
                id=record.get("id") or "",
                edited_at=record.get("edited_at") or None,
                document_html=record.get("document_html") or None,
            )


# ---------------------------------------------------------------------------
# Row processing
# ---------------------------------------------------------------------------

def _row_edited_at(row: ExportRow, result: SyncResult) -> datetime | None:
    """Parse the row's edited_at, reporting (not raising) bad values."""
    if row.edited_at is None:
        return None
    try:
        return watermark.parse_timestamp(row.edited_at)
    except ValueError:
        print(f"[sync] WARNING: Unparseable edited_at {row.edited_at!r} for row with id: {row.id} — skipped")
        result.invalid_timestamps += 1
        return None


def process_rows(
    rows: Iterable[ExportRow],
    synced_at: datetime,
    deck_name: str,
) -> SyncResult:
    """
    Extract Anki import lines from every row edited after *synced_at*.

    Rows without a document still advance the watermark. Cloze lines are
    deduplicated across the whole run; other card types are not.
    """
    result = SyncResult(previous_watermark=synced_at, new_watermark=synced_at)
    seen_cloze: set[str] = set()

    for row in rows:
        result.rows_seen += 1
        edited_at = _row_edited_at(row, result)
        if edited_at is None or edited_at <= synced_at:
            result.rows_skipped += 1
            continue

        result.rows_processed += 1
        if edited_at > result.new_watermark:
            result.new_watermark = edited_at

        if not row.document_html:
            continue

        for item in extract_items(row.document_html):
            line = format_card(item, deck_name, seen_cloze)
            if line is not None:
                if item.kind is PatternKind.CLOZE:
                    print(f"[sync] Found #{item.kind.value} pattern: {item.question}")
                else:
                    print(f"[sync] Found #{item.kind.value} pattern: Question: {item.question}")
                result.lines.append(line)
            elif item.kind is PatternKind.CLOZE and item.question:
                result.duplicate_cloze += 1
            else:
                print(f"[sync] Pattern #{item.kind.value} not matched properly for row with id: {row.id}")
                result.unmatched_patterns += 1

    return result


def sync_export(
    csv_path: str | Path,
    deck_name: str,
    synced_at_path: str | Path,
    dry_run: bool = False,
) -> SyncResult:
    """
    Run one incremental sync of a Reflect export.

    Pipeline:
    1. Load the last sync time from *synced_at_path*
    2. Extract cards from rows edited since then
    3. Write <export>.txt next to the CSV
    4. Save the new watermark (only after the file was written)

    With *dry_run* nothing is written and the watermark is left alone.
    """
    csv_path = Path(csv_path).resolve()
    if not csv_path.exists():
        raise FileNotFoundError(f"File not found: {csv_path}")

    print(f"[sync] Reading export: {csv_path.name}")
    synced_at = watermark.load(synced_at_path)

    result = process_rows(read_rows(csv_path), synced_at, deck_name)
    result.csv_path = csv_path
    result.output_path = output_path_for(csv_path)

    print(
        f"[sync] {result.rows_processed} of {result.rows_seen} row(s) edited since last sync, "
        f"{len(result.lines)} card(s) extracted"
    )

    write_import_file(result.lines, result.output_path, dry_run=dry_run)
    if dry_run:
        print(f"[sync]   [DRY RUN] Would update watermark to: {watermark.format_timestamp(result.new_watermark)}")
        return result

    result.written = True
    watermark.save(synced_at_path, result.new_watermark)
    return result
