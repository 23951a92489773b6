"""
Minimal stylesheet generation.

Writes the @font-face for the packed font, the shared icon base rule, the
non-icon rules the site still uses, and one :before rule per new codepoint.
"""

import posixpath
import re

import rcssmin

from icon_minifier.config.fonts import OUTPUT_FORMATS
from icon_minifier.core import css
from icon_minifier.core.css import Rule

FONT_PROPERTY_RE = re.compile(r"font-(family|style|weight)")
KEYFRAMES_RE = re.compile(r"^@(?:-[a-z]+-)?keyframes\s+(\S+)")

BASE_DECLARATIONS = """
  font-style: normal;
  font-variant: normal;
  -moz-osx-font-smoothing: grayscale;
  -webkit-font-smoothing: antialiased;
  display: inline-block;
  line-height: 1;
  text-rendering: auto;"""


def font_face_block(
    family: str, font_files: list[str], css_folder: str, font_folder: str
) -> str:
    """@font-face rule pointing at the generated font files."""
    relative = posixpath.relpath(font_folder, css_folder)
    sources = []
    for filename in font_files:
        fmt = OUTPUT_FORMATS[posixpath.splitext(filename)[1].lstrip(".")]
        sources.append(f'url({posixpath.join(relative, filename)}) format("{fmt}")')

    return (
        "@font-face {\n"
        f'  font-family: "{family}";\n'
        "  font-style: normal;\n"
        "  font-variant: normal;\n"
        "  font-display: block;\n"
        f"  src: {', '.join(sources)};\n"
        "}"
    )


def special_rules(rules: list[Rule], used_classes: set[str]) -> list[Rule]:
    """
    Non-icon rules still needed by the site.

    Keeps rules whose selector uses any of the given classes, except those
    setting the font itself, plus any @keyframes they reference.
    """
    kept = [
        rule
        for rule in rules
        if any(cls in used_classes for cls in css.extract_classes(rule.selector))
        and not FONT_PROPERTY_RE.search(rule.body)
    ]

    for rule in rules:
        match = KEYFRAMES_RE.match(rule.selector)
        if not match:
            continue
        name = re.compile(rf"(?<![\w-]){re.escape(match.group(1))}(?![\w-])")
        if any(name.search(k.body) for k in kept):
            kept.append(rule)
    return kept


def codepoint_rules(selectors: dict[int, list[str]]) -> list[str]:
    """One :before rule per codepoint, listing every selector sharing it."""
    return [
        f"{', '.join(f'{sel}:before' for sel in sels)} {{\n"
        f'  content: "\\{codepoint:x}";\n'
        "}"
        for codepoint, sels in selectors.items()
    ]


def generate_css(
    rules: list[Rule],
    variant_classes: list[str],
    font_files: list[str],
    used_special_classes: set[str],
    selectors: dict[int, list[str]],
    *,
    font_family: str,
    css_folder: str,
    font_folder: str,
    minify: bool = True,
) -> str:
    """
    Build the minimal stylesheet.

    Args:
        rules: Rules of the source stylesheet
        variant_classes: Classes that select the icon font
        font_files: Generated font filenames
        used_special_classes: Non-icon classes found in the crawl
        selectors: New codepoint -> icon selectors
        font_family: Family name of the generated font
        css_folder: Output stylesheet folder, relative to the site root
        font_folder: Output font folder, relative to the site root
        minify: Minify the result

    Returns:
        Stylesheet text
    """
    parts = [font_face_block(font_family, font_files, css_folder, font_folder)]

    if variant_classes:
        base_selector = ", ".join(f".{cls}" for cls in variant_classes)
        parts.append(
            f"{base_selector} {{\n"
            f'  font-family: "{font_family}";'
            f"{BASE_DECLARATIONS}\n"
            "}"
        )

    for rule in special_rules(rules, used_special_classes):
        parts.append(f"{rule.selector} {{{rule.body}}}")

    parts.extend(codepoint_rules(selectors))

    text = "\n\n".join(parts) + "\n"
    if minify:
        return rcssmin.cssmin(text)
    return text
