"""
Reflect to Anki Exporter
========================
Reads the CSV exports of your Reflect notes, extracts flashcards from
bullets tagged #spaced, #reversed, #type and #cloze, and generates a .txt
file ready for Anki import. A .synced_at watermark keeps re-runs
incremental: only notes edited since the last run are exported.

No plugins required — only Reflect, Anki, and Python.
"""

__version__ = "1.0.0"
