"""
Minifier configuration.

All tunables of a minification pass live in one frozen dataclass with stated
defaults, merged once when a pass starts.
"""

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path

from icon_minifier.config.fonts import MAX_CODEPOINT, OUTPUT_FORMATS, PUA_BASE
from icon_minifier.config.paths import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CSS_FOLDER,
    DEFAULT_FONT_FOLDER,
    DEFAULT_OUTPUT_STEM,
)


class AmbiguousVariantPolicy(str, Enum):
    """What to do when an icon's modifiers select more than one font face."""

    FIRST = "first"  # Use the first matching face in declaration order
    ERROR = "error"  # Abort the stylesheet
    EXPAND_ALL = "expand_all"  # Emit one rule per matching face


@dataclass(frozen=True)
class MinifierOptions:
    """Options for a minification pass."""

    exts: tuple[str, ...] = ("html",)
    cache: bool = True
    cache_dir: Path = DEFAULT_CACHE_DIR

    output_filename: str = DEFAULT_OUTPUT_STEM
    output_css_folder: str = DEFAULT_CSS_FOLDER
    output_font_folder: str = DEFAULT_FONT_FOLDER
    output_font_family: str = "Custom Minified Font"
    font_formats: tuple[str, ...] = ("woff2", "ttf")

    replace_css_links: bool = False
    cache_bust: bool = False

    codepoint_base: int = PUA_BASE
    share_codepoint_counter: bool = False
    on_ambiguous_variant: AmbiguousVariantPolicy = AmbiguousVariantPolicy.FIRST

    def __post_init__(self):
        if not self.exts:
            raise ValueError("At least one file extension must be crawled")
        unknown = [fmt for fmt in self.font_formats if fmt not in OUTPUT_FORMATS]
        if unknown or not self.font_formats:
            raise ValueError(
                f"Unsupported font formats: {', '.join(unknown) or '(none)'}. "
                f"Expected any of {', '.join(OUTPUT_FORMATS)}"
            )
        if not 0 <= self.codepoint_base <= MAX_CODEPOINT:
            raise ValueError(f"Codepoint base out of range: {self.codepoint_base:#x}")

    @classmethod
    def from_overrides(cls, **overrides) -> "MinifierOptions":
        """
        Build options from caller overrides.

        Overrides set to None fall back to the defaults, so CLI flags that were
        not given can be passed through as-is.

        Raises:
            TypeError: If an override does not name an option
            ValueError: If a value is invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise TypeError(f"Unknown options: {', '.join(unknown)}")

        values = {k: v for k, v in overrides.items() if v is not None}
        for key in ("exts", "font_formats"):
            if key in values:
                values[key] = tuple(values[key])
        if "cache_dir" in values:
            values["cache_dir"] = Path(values["cache_dir"])
        if "on_ambiguous_variant" in values:
            values["on_ambiguous_variant"] = AmbiguousVariantPolicy(
                values["on_ambiguous_variant"]
            )
        return cls(**values)
