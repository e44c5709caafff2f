"""Configuration constants for zenscript."""

import os
from pathlib import Path

from zenscript.models.document import EditorSettings, Theme

# Directory with data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/zenscript").expanduser(),
    Path("~/.zenscript").expanduser(),
    Path("~/.config/zenscript").expanduser(),
]

# Environment variable overriding DATA_DIRECTORIES.
DATA_DIR_ENV = "ZENSCRIPT_DATA_DIR"

# Snapshot file names inside the data directory.
FILES_FILENAME = "files.json"
SETTINGS_FILENAME = "settings.json"
# Single-document format used before the file tree existed.
LEGACY_CONTENT_FILENAME = "content.txt"

DEFAULT_DOCUMENT_TITLE = "New Page"
LEGACY_DOCUMENT_TITLE = "Untitled Draft"

# Image grid geometry, width is a percentage of the container.
DEFAULT_GRID_ALIGN = "center"
DEFAULT_GRID_WIDTH = 80
MIN_GRID_WIDTH = 20
MAX_GRID_WIDTH = 100

# Fraction of the target height on each side of the merge band.
MERGE_BAND_MARGIN = 0.25

DEFAULT_SETTINGS = EditorSettings()

THEMES: list[Theme] = [
    Theme("zen-classic", "Classic Zen", "#ded9c5", "#ffffff", "#3b3221", "#8a8475",
          "#3b3221", "#e6e1d1", "#d4d0c0"),
    Theme("soda-light", "Soda Light", "#e6e6e6", "#ffffff", "#3c3c3c", "#969696",
          "#f2777a", "#d6e1ea", "#dcdcdc"),
    Theme("wonder-ink", "Wonder Ink", "#d0d8d2", "#f7f9f8", "#37474f", "#90a4ae",
          "#26a69a", "#cfd8dc", "#b0bec5"),
    Theme("writers-study", "Writer's Study", "#9eaab6", "#f5f7fa", "#2c3e50", "#7f8c8d",
          "#34495e", "#d5dbdb", "#cbd5e0"),
    Theme("midnight-ink", "Midnight Ink", "#0f172a", "#1e293b", "#e2e8f0", "#64748b",
          "#38bdf8", "#334155", "#334155"),
    Theme("forest-whisper", "Forest Whisper", "#2e3630", "#e6ede8", "#1a2920", "#6b7d72",
          "#2d4a3e", "#cce3d6", "#b0c4b9"),
    Theme("soft-sepia", "Soft Sepia", "#e8e0d5", "#fdfbf7", "#5c4b37", "#a3927e",
          "#8c7356", "#ede5da", "#dcd3c8"),
]

FONTS: dict[str, str] = {
    "sans": "Helvetica / Sans",
    "serif": "Elegant Serif",
    "mono": "Consolas / Mono",
    "hand": "Handwritten",
}


def get_theme(theme_id: str) -> Theme:
    """Look up a theme by id, falling back to the first theme."""
    for theme in THEMES:
        if theme.id == theme_id:
            return theme
    return THEMES[0]


def resolve_data_directory() -> Path:
    """Return the data directory: env override, first existing candidate, or the first candidate."""
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
