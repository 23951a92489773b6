"""
Filesystem path constants.

Centralizes path definitions to avoid magic strings in individual modules.
"""

from pathlib import Path

# Fetched stylesheets and fonts persist here across runs
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "icon-minifier"

# Output locations, relative to the crawled site directory
DEFAULT_CSS_FOLDER = "css"
DEFAULT_FONT_FOLDER = "webfonts"
DEFAULT_OUTPUT_STEM = "icons"
