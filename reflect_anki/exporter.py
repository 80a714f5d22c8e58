"""
Anki export file generation.

Turns resolved study items into tab-separated lines and writes the .txt
file ready for Anki's built-in File → Import. The header lines tell Anki
which column holds the note type, the deck and the tags, so one file can
mix Basic, reversed, type-in and Cloze notes.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from .parser import PatternKind, StudyItem

HEADER_LINES = [
    "#separator:tab",
    "#html:true",
    "#notetype column:1",
    "#deck column:2",
    "#tags column:5",
]

NOTE_TYPES = {
    PatternKind.SPACED: "Basic",
    PatternKind.REVERSED: "Basic (and reversed card)",
    PatternKind.TYPE: "Basic (type in the answer)",
    PatternKind.CLOZE: "Cloze",
}


def _to_single_line(text: str) -> str:
    """Convert newlines to <br> for Anki's one-line-per-card format."""
    return text.replace("\n", "<br>")


def _quote_multiline(answer: str) -> str:
    """Wrap an answer spanning several lines in double quotes (CSV style)."""
    if "\n" not in answer:
        return answer
    return '"' + answer.replace('"', '""') + '"'


def join_answers(answers: list[str]) -> str:
    """Join answers one per line, quoting multi-line ones."""
    return "\n".join(_quote_multiline(a) for a in answers)


def format_card(
    item: StudyItem,
    deck_name: str,
    seen_cloze: set[str],
) -> str | None:
    """
    Format a study item as one Anki import line.

    Cloze items use only the question as the cloze text and are skipped
    when the exact same line was already produced in this run (tracked in
    *seen_cloze*). Other kinds need a question and at least one non-empty
    answer.

    Returns None when nothing should be written.
    """
    note_type = NOTE_TYPES[item.kind]

    if item.kind is PatternKind.CLOZE:
        if not item.question:
            return None
        line = f"{note_type}\t{deck_name}\t{_to_single_line(item.question)}\t\t"
        if line in seen_cloze:
            return None
        seen_cloze.add(line)
        return line

    if not item.question or not any(item.answers):
        return None
    answers_text = join_answers(item.answers)
    return f"{note_type}\t{deck_name}\t{_to_single_line(item.question)}\t{answers_text}\t"


def output_path_for(csv_path: Path) -> Path:
    """The import file sits next to the export: reflect-x.csv → reflect-x.txt."""
    return Path(csv_path).with_suffix(".txt")


def write_import_file(
    lines: list[str],
    output_path: Path,
    dry_run: bool = False,
) -> None:
    """
    Write the header and card lines to *output_path*.

    The file is written to a temporary sibling first and renamed into
    place, so a failed write never leaves a half-written import file.
    """
    output_path = Path(output_path)
    print(f"[export] Generating Anki import file: {output_path.name}")

    if dry_run:
        print(f"[export]   [DRY RUN] Would create: {output_path.name}")
        for i, line in enumerate(lines, 1):
            print(f"[export]   Card {i}: {line[:60]}...")
        return

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output_path.stem}-", suffix=".tmp", dir=output_path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            for line in HEADER_LINES + lines:
                f.write(line + "\n")
        os.replace(tmp_name, output_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    print(f"[export] Created: {output_path.name} ({len(lines)} cards)")


def print_import_instructions(output_path: Path) -> None:
    """Print Anki import instructions for the generated file."""
    print()
    print("=" * 60)
    print("  IMPORT INSTRUCTIONS")
    print("=" * 60)
    print(f"\n  {Path(output_path).name}:")
    print("    1. Anki → File → Import")
    print("    2. Select this file")
    print("    3. Check that note type and deck come from columns 1 and 2")
    print("    4. Click Import")
