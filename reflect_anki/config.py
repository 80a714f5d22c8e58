"""
Configuration management.

Handles loading/saving the config.json file, resolving the deck name and
the folders Reflect exports are picked up from and archived to, and
moving the latest export into the archive folder.
"""

import json
import shutil
from pathlib import Path

# Config lives next to the package
CONFIG_FILE = Path(__file__).resolve().parent.parent / "config.json"

DEFAULT_DECK_NAME = "Reflect"
DEFAULT_SOURCE_DIR = "~/Downloads"
DEFAULT_DESTINATION_DIR = "reflect-dumps"
DEFAULT_EXPORT_PATTERN = "reflect-*.csv"
DEFAULT_SYNCED_AT_FILE = ".synced_at"


def load() -> dict:
    """Load config from config.json. Returns empty dict if not found."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def save(config: dict) -> None:
    """Save config to config.json."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


def _resolve(key: str, label: str, default: str, cli_override: str = None) -> str:
    """
    Resolve a config value.

    Priority:
    1. CLI argument (saved to config.json for future runs)
    2. Saved config
    3. Default
    """
    config = load()

    if cli_override:
        config[key] = cli_override
        save(config)
        print(f"[config] {label} set via CLI: {cli_override}")
        return cli_override

    if key in config:
        value = config[key]
        print(f"[config] Loaded {label}: {value}")
        return value

    print(f"[config] Using default {label}: {default}")
    return default


def get_deck_name(cli_override: str = None) -> str:
    """Get the Anki deck every card is imported into (default: Reflect)."""
    return _resolve("deck_name", "deck name", DEFAULT_DECK_NAME, cli_override)


def get_source_dir(cli_override: str = None) -> Path:
    """Get the folder Reflect exports are downloaded to (default: ~/Downloads)."""
    value = _resolve("source_dir", "source directory", DEFAULT_SOURCE_DIR, cli_override)
    return Path(value).expanduser()


def get_destination_dir(cli_override: str = None) -> Path:
    """Get the folder exports are moved into. Relative paths use the working directory."""
    value = _resolve("destination_dir", "destination directory", DEFAULT_DESTINATION_DIR, cli_override)
    return Path.cwd() / Path(value).expanduser()


def get_export_pattern(cli_override: str = None) -> str:
    """Get the glob matching Reflect export file names."""
    return _resolve("export_pattern", "export pattern", DEFAULT_EXPORT_PATTERN, cli_override)


def get_synced_at_path(cli_override: str = None) -> Path:
    """Get the watermark file path. Relative paths use the working directory."""
    value = _resolve("synced_at_file", "watermark file", DEFAULT_SYNCED_AT_FILE, cli_override)
    return Path.cwd() / Path(value).expanduser()


# ---------------------------------------------------------------------------
# Export discovery helpers
# ---------------------------------------------------------------------------

def find_latest_export(folder: Path, pattern: str = DEFAULT_EXPORT_PATTERN) -> Path | None:
    """Return the most recently modified file in *folder* matching *pattern*."""
    files = sorted(Path(folder).glob(pattern))
    print(f"[config] Files found: {[f.name for f in files]}")
    if not files:
        return None
    return max(files, key=lambda f: f.stat().st_mtime)


def move_latest_export(
    source_dir: Path,
    destination_dir: Path,
    pattern: str = DEFAULT_EXPORT_PATTERN,
) -> Path | None:
    """
    Move the latest Reflect export from *source_dir* into *destination_dir*.

    Failures to create the destination, search, or move are reported as
    warnings. Returns the moved file's new path, or None if nothing was moved.
    """
    destination_dir = Path(destination_dir)
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"[config] Warning: Could not create destination directory. {e}")

    try:
        latest = find_latest_export(source_dir, pattern)
    except OSError as e:
        print(f"[config] Warning: Could not search for files. {e}")
        return None

    if latest is None:
        print(f"[config] No file matching '{pattern}' found in {source_dir}.")
        return None

    print(f"[config] Found file to move: {latest}")
    target = destination_dir / latest.name
    try:
        shutil.move(str(latest), str(target))
    except OSError as e:
        print(f"[config] Warning: Could not move the file. {e}")
        return None

    print(f"[config] File moved to {destination_dir}")
    return target
