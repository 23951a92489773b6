"""
Font-face association.

Works out which @font-face supplies glyphs for which CSS classes. In a
multi-file icon set (e.g. Font Awesome brands/solid/regular) this tells us
which font to pull an icon from when a variant class such as `fab` is seen.
"""

import posixpath
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from urllib.parse import urljoin, urlsplit

from fontTools.ttLib import TTFont, TTLibError

from icon_minifier.config.fonts import (
    DEFAULT_FONT_STYLE,
    DEFAULT_FONT_WEIGHT,
    LOADABLE_FONT_EXTS,
    WEIGHT_ALIASES,
)
from icon_minifier.core import css
from icon_minifier.core.css import Rule
from icon_minifier.core.font_io import Glyph, find_glyphs, load_font
from icon_minifier.errors import FontLoadError
from icon_minifier.utils.logging import logger


def is_url(location: str) -> bool:
    """Whether a location is fetched over the network."""
    return location.startswith("http:") or location.startswith("https:")


def resolve_source(stylesheet: str, source: str, site_root: str | None = None) -> str:
    """
    Resolve a font source against the stylesheet that references it.

    Args:
        stylesheet: URL or local path of the stylesheet
        source: url() value from the @font-face block
        site_root: Local directory that "/absolute" paths are relative to

    Returns:
        Absolute URL or local path
    """
    if is_url(source):
        return source
    if is_url(stylesheet):
        return urljoin(stylesheet, source)

    # Local files cannot carry ?v=4.7.0 or #iefix suffixes
    source = source.split("?")[0].split("#")[0]
    if source.startswith("/"):
        if site_root is None:
            return source
        return posixpath.join(site_root, source.lstrip("/"))

    stylesheet_path = stylesheet.split("?")[0]
    return posixpath.normpath(posixpath.join(posixpath.dirname(stylesheet_path), source))


def _source_format(source: str) -> str:
    path = urlsplit(source).path if is_url(source) else source
    return PurePosixPath(path).suffix.lstrip(".").lower()


def _canonical_weight(weight: str) -> str:
    return WEIGHT_ALIASES.get(weight, weight)


@dataclass
class FontFaceDescriptor:
    """An @font-face block and the classes that select it."""

    family: str
    style: str
    weight: str
    sources: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)

    font: TTFont | None = field(default=None, repr=False)
    source_size: int = 0

    @property
    def label(self) -> str:
        return f"{self.family}, {self.style}, {self.weight}"

    def matches(self, family: str | None, style: str | None, weight: str | None) -> bool:
        """Whether a variant class's declarations select this face."""
        return (
            family == self.family
            and (style or DEFAULT_FONT_STYLE) == self.style
            and _canonical_weight(weight or DEFAULT_FONT_WEIGHT)
            == _canonical_weight(self.weight)
        )

    def load(self, fetch: Callable[[str], bytes]) -> TTFont:
        """
        Decode the first loadable source.

        Args:
            fetch: Returns the raw bytes of a source URL or path

        Raises:
            FontLoadError: If no source could be decoded
            FetchError: If a source could not be read
        """
        if self.font is not None:
            return self.font

        for source in self.sources:
            fmt = _source_format(source)
            if fmt not in LOADABLE_FONT_EXTS:
                logger.debug(f"Skipping {fmt or 'unknown'} source {source}")
                continue

            data = fetch(source)
            try:
                self.font = load_font(data, fmt)
            except TTLibError as e:
                logger.warning(f"Could not decode {source}: {e}")
                continue

            self.source_size = len(data)
            logger.info(f"Loaded {source} ({self.source_size} bytes)")
            return self.font

        raise FontLoadError(self.label, self.sources)

    def find_glyphs(self, codepoint: int) -> list[Glyph]:
        """Glyphs at a codepoint in the loaded font."""
        if self.font is None:
            raise RuntimeError(f"Font face not loaded: {self.label}")
        return find_glyphs(self.font, codepoint)


@dataclass
class _VariantCandidate:
    family: str | None = None
    style: str | None = None
    weight: str | None = None


@dataclass
class FontFaceTable:
    """
    Font faces of one stylesheet.

    Faces are stored by index; the lookup maps refer to those indices.
    """

    stylesheet: str = ""
    faces: list[FontFaceDescriptor] = field(default_factory=list)
    by_class: dict[str, int] = field(default_factory=dict)

    @property
    def active(self) -> list[int]:
        """Indices of faces selected by at least one class, in declaration order."""
        return [i for i, face in enumerate(self.faces) if face.classes]

    @property
    def active_faces(self) -> list[FontFaceDescriptor]:
        return [self.faces[i] for i in self.active]

    @property
    def is_multi_variant(self) -> bool:
        return len(self.active) > 1

    def variant_classes(self) -> list[str]:
        """Every associated class, grouped by face."""
        return [cls for face in self.active_faces for cls in face.classes]

    def load_fonts(self, fetch: Callable[[str], bytes]) -> None:
        """Load active faces one after another."""
        for face in self.active_faces:
            face.load(fetch)


def parse_font_face(
    rule: Rule, stylesheet: str, site_root: str | None = None
) -> FontFaceDescriptor | None:
    """
    Build a descriptor from an @font-face rule.

    Returns None (with a warning) when family, style, or weight is missing.
    """
    family = css.font_family(rule.body)
    if not family:
        logger.warning("Skipping @font-face without `font-family`")
        return None

    style = css.font_style(rule.body)
    if not style:
        logger.warning(f"Skipping @font-face {family} without `font-style`")
        return None

    weight = css.font_weight(rule.body)
    if not weight:
        logger.warning(f"Skipping @font-face {family} without `font-weight`")
        return None

    sources = [
        resolve_source(stylesheet, src, site_root) for src in css.font_sources(rule.body)
    ]
    return FontFaceDescriptor(family, style, weight, sources=sources)


def associate_font_faces(
    rules: list[Rule], stylesheet: str, site_root: str | None = None
) -> FontFaceTable:
    """
    Associate @font-face blocks with the variant classes that select them.

    A variant class is any class of a rule declaring font-family. Its family,
    style, and weight are accumulated across every rule that mentions it, and
    it attaches to the first face whose triple matches.

    Args:
        rules: Parsed stylesheet rules
        stylesheet: URL or path the stylesheet came from
        site_root: Directory "/absolute" font paths resolve against

    Returns:
        Table of all well-formed faces; see FontFaceTable.active
    """
    candidates: dict[str, _VariantCandidate] = {}
    for rule in rules:
        if rule.selector == "@font-face" or not css.declares(rule.body, "font-family"):
            continue
        for cls in css.extract_classes(rule.selector):
            candidates.setdefault(cls, _VariantCandidate())

    table = FontFaceTable(stylesheet=stylesheet)
    for rule in rules:
        if rule.selector == "@font-face":
            face = parse_font_face(rule, stylesheet, site_root)
            if face is not None:
                table.faces.append(face)
            continue
        if rule.is_at_rule or rule.is_pseudo:
            continue

        family = css.font_family(rule.body)
        style = css.font_style(rule.body)
        weight = css.font_weight(rule.body)
        if not (family or style or weight):
            continue

        for cls in css.extract_classes(rule.selector):
            candidate = candidates.get(cls)
            if candidate is None:
                continue
            if family:
                candidate.family = family
            if style:
                candidate.style = style
            if weight:
                candidate.weight = weight

    for index, face in enumerate(table.faces):
        matched = [
            cls
            for cls, c in candidates.items()
            if face.matches(c.family, c.style, c.weight)
        ]
        for cls in matched:
            logger.debug(f"Associated class {cls} with font face {face.label}")
            face.classes.append(cls)
            table.by_class[cls] = index
            del candidates[cls]

    for index, face in enumerate(table.faces):
        if not face.classes:
            logger.info(f"Font face {face.label} is not used by any class (skipped)")

    return table
