"""
Sync watermark.

The .synced_at file holds a single ISO-8601 timestamp: the most recent
edited_at value already exported. Rows edited at or before it are skipped
on the next run.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    A trailing "Z" is accepted; timestamps without an offset are taken
    as UTC. Raises ValueError for anything unparseable.
    """
    value = value.strip()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """ISO-8601 string, using "Z" for UTC: 2024-01-02T00:00:00Z."""
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-len("+00:00")] + "Z"
    return text


def load(path: str | Path) -> datetime:
    """Read the last sync time. Returns the Unix epoch if the file is missing."""
    path = Path(path)
    if not path.exists():
        print(f"[watermark] No {path.name} file — starting from {format_timestamp(EPOCH)}")
        return EPOCH

    with open(path, "r", encoding="utf-8") as f:
        content = f.read().strip()

    if not content:
        print(f"[watermark] {path.name} is empty — starting from {format_timestamp(EPOCH)}")
        return EPOCH

    try:
        synced_at = parse_timestamp(content)
    except ValueError:
        raise ValueError(f"Invalid timestamp in {path}: {content!r}") from None

    print(f"[watermark] Last sync time: {format_timestamp(synced_at)}")
    return synced_at


def save(path: str | Path, synced_at: datetime) -> None:
    """Overwrite the .synced_at file with *synced_at*."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(format_timestamp(synced_at))
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
    print(f"[watermark] Updated {path.name} with: {format_timestamp(synced_at)}")
