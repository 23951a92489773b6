"""
Writing generated fonts and stylesheets.
"""

import hashlib
from pathlib import Path

from fontTools.ttLib import TTFont

from icon_minifier.core.font_io import write_font
from icon_minifier.utils.logging import logger

# Hex digits of the content hash appended when cache busting
HASH_LENGTH = 16


def content_hash(data: str | bytes) -> str:
    """Short md5 digest used to make output filenames unique per content."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()[:HASH_LENGTH]


def output_stem(stem: str, data: str | bytes, cache_bust: bool) -> str:
    return f"{stem}-{content_hash(data)}" if cache_bust else stem


def write_fonts(
    font: TTFont,
    directory: Path,
    stem: str,
    formats: tuple[str, ...],
    *,
    cache_bust: bool = False,
) -> dict[str, bytes]:
    """
    Save a font in each output format.

    Args:
        font: Font to write
        directory: Output directory (created if missing)
        stem: Filename without extension
        formats: Output formats, e.g. ("woff2", "ttf")
        cache_bust: Append a content hash to each filename

    Returns:
        Filename -> written bytes, in format order
    """
    directory.mkdir(parents=True, exist_ok=True)

    written = {}
    for fmt in formats:
        data = write_font(font, fmt)
        filename = f"{output_stem(stem, data, cache_bust)}.{fmt}"
        logger.info(f"Writing font to {directory / filename}")
        (directory / filename).write_bytes(data)
        written[filename] = data
    return written


def save_css(text: str, directory: Path, stem: str, *, cache_bust: bool = False) -> Path:
    """
    Save a stylesheet.

    Returns:
        Path of the written file
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{output_stem(stem, text, cache_bust)}.css"
    logger.info(f"Writing css to {path}")
    path.write_text(text, encoding="utf-8")
    return path
