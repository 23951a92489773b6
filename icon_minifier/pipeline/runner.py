"""
Minification pipeline orchestration.

Runs every step for each icon stylesheet a site links to, one stylesheet at
a time. A failing stylesheet is reported and skipped; the rest still run.
"""

import math
import posixpath
from dataclasses import dataclass, field
from pathlib import Path

from icon_minifier.config.options import MinifierOptions
from icon_minifier.core.css import all_classes, class_codepoints, parse_rules
from icon_minifier.core.font_io import build_font
from icon_minifier.core.fontface import associate_font_faces, is_url
from icon_minifier.core.icons import infer_prefix, parse_icons
from icon_minifier.core.remap import CodepointAllocator, GlyphRemapper
from icon_minifier.errors import IconMinifierError, NoActiveFontFacesError
from icon_minifier.operations.crawl import SiteCrawler
from icon_minifier.operations.fetch import ResponseCache, get_content
from icon_minifier.operations.output import save_css, write_fonts
from icon_minifier.operations.stylesheet import generate_css
from icon_minifier.utils.logging import logger

# Markup files searched for stylesheet links
LINK_EXTS = ["html"]


@dataclass
class StylesheetReport:
    """Result of minifying one stylesheet."""

    stylesheet: str
    css_path: Path
    font_files: list[str]
    icon_count: int
    glyph_count: int
    font_bytes_before: int
    font_bytes_after: int
    css_bytes_before: int
    css_bytes_after: int


@dataclass
class RunSummary:
    """Results of a whole run."""

    reports: list[StylesheetReport] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)  # stylesheet -> error

    @property
    def ok(self) -> bool:
        return not self.failures


def resolve_stylesheet(directory: Path, reference: str, page: Path | None = None) -> str:
    """
    Location of a stylesheet referenced from markup.

    Root-absolute references resolve against the site root and relative ones
    against the referencing page's folder (the site root if no page is given).
    Query strings and fragments are dropped.
    """
    if is_url(reference):
        return reference
    path = reference.split("?")[0].split("#")[0]
    if path.startswith("/") or page is None:
        base = Path(directory)
        path = path.lstrip("/")
    else:
        base = page.parent
    return posixpath.normpath((base / path).as_posix())


def savings(before: int, after: int) -> float:
    """Percentage saved, truncated to one decimal."""
    if before <= 0:
        return 0.0
    return math.floor((before - after) * 1000 / before) / 10


def log_stats(label: str, before: int, after: int) -> None:
    logger.info(f"{label}:")
    logger.info(f"  Before: {before}")
    logger.info(f"  After:  {after} (saved {savings(before, after)}%)")


def process_stylesheet(
    location: str,
    references: dict[str, list[Path]],
    directory: Path,
    crawler: SiteCrawler,
    options: MinifierOptions,
    allocator: CodepointAllocator,
    cache: ResponseCache | None = None,
) -> StylesheetReport | None:
    """
    Minify one icon stylesheet and its fonts.

    Args:
        location: Resolved stylesheet URL or path
        references: Each reference to it as written in the markup -> pages using it
        directory: Site root
        crawler: Indexed site files
        options: Pass options
        allocator: Source of new codepoints
        cache: Response cache for remote files

    Returns:
        Report, or None if the stylesheet defines no icons

    Raises:
        IconMinifierError: If the stylesheet cannot be minified
    """
    text = get_content(location, cache=cache)
    rules = parse_rules(text)

    codepoints = class_codepoints(rules)
    if not codepoints:
        logger.warning(f"No icon classes defined in {location} (skipped)")
        return None

    icon_classes = set(codepoints)
    prefix = infer_prefix(codepoints)
    logger.info(f"Found {len(codepoints)} icon classes with prefix '{prefix}'")

    # Oddball classes without the prefix still need to be crawled
    stylesheet_classes = all_classes(rules)
    special_classes = [c for c in stylesheet_classes if c not in icon_classes]
    non_prefix_classes = [c for c in stylesheet_classes if not c.startswith(prefix)]

    table = associate_font_faces(rules, location, site_root=str(directory))
    if not table.active:
        raise NoActiveFontFacesError(location)

    combinations = crawler.find_icons(prefix, list(options.exts), non_prefix_classes)
    icons = parse_icons(combinations, icon_classes)
    logger.info(f"Parsed {len(icons)} unique icons")
    logger.debug(", ".join(sorted(".".join(icon.classes) for icon in icons)))

    table.load_fonts(lambda src: get_content(src, binary=True, cache=cache))

    remapper = GlyphRemapper(table, allocator, options.on_ambiguous_variant)
    result = remapper.remap(icons, codepoints)

    font = build_font(table.active_faces[0].font, result.glyphs, options.output_font_family)
    written = write_fonts(
        font,
        directory / options.output_font_folder,
        options.output_filename,
        options.font_formats,
        cache_bust=options.cache_bust,
    )

    used_classes = {cls for icon in icons for cls in icon.classes}
    new_css = generate_css(
        rules,
        table.variant_classes(),
        list(written),
        {c for c in special_classes if c in used_classes},
        result.selectors,
        font_family=options.output_font_family,
        css_folder=options.output_css_folder,
        font_folder=options.output_font_folder,
    )
    css_path = save_css(
        new_css,
        directory / options.output_css_folder,
        options.output_filename,
        cache_bust=options.cache_bust,
    )

    if options.replace_css_links:
        new_url = "/" + css_path.relative_to(directory).as_posix()
        for reference, pages in references.items():
            crawler.replace_css_links(LINK_EXTS, reference, new_url, pages)

    font_before = sum(face.source_size for face in table.active_faces)
    font_after = next(
        (len(data) for name, data in written.items() if name.endswith(".woff2")),
        len(next(iter(written.values()))),
    )
    log_stats("Font", font_before, font_after)
    log_stats("CSS", len(text), len(new_css))

    return StylesheetReport(
        stylesheet=next(iter(references)),
        css_path=css_path,
        font_files=list(written),
        icon_count=len(icons),
        glyph_count=len(result.glyphs),
        font_bytes_before=font_before,
        font_bytes_after=font_after,
        css_bytes_before=len(text),
        css_bytes_after=len(new_css),
    )


def minify_site(directory: Path, options: MinifierOptions | None = None) -> RunSummary:
    """
    Minify every icon stylesheet linked from a site.

    Finding no icon stylesheet is not an error; the run simply does nothing.

    Args:
        directory: Site root
        options: Pass options (defaults if omitted)

    Returns:
        Per-stylesheet reports and failures
    """
    options = options or MinifierOptions()
    directory = Path(directory)
    cache = ResponseCache(options.cache_dir) if options.cache else None
    summary = RunSummary()

    crawler = SiteCrawler()
    crawler.index_files(directory, sorted(set(options.exts) | set(LINK_EXTS)))
    # The same stylesheet may be written differently on pages at different depths
    stylesheets: dict[str, dict[str, list[Path]]] = {}
    for page, reference in crawler.find_css_files(LINK_EXTS):
        location = resolve_stylesheet(directory, reference, page)
        stylesheets.setdefault(location, {}).setdefault(reference, []).append(page)

    if not stylesheets:
        logger.info("No icon stylesheets found. Nothing to do")
        return summary

    logger.info(f"Processing {len(stylesheets)} stylesheet(s)")

    shared_allocator = None
    if options.share_codepoint_counter:
        shared_allocator = CodepointAllocator(options.codepoint_base)

    for location, references in stylesheets.items():
        reference = next(iter(references))
        logger.info(f"Processing stylesheet: {reference}")
        allocator = shared_allocator or CodepointAllocator(options.codepoint_base)
        try:
            report = process_stylesheet(
                location, references, directory, crawler, options, allocator, cache
            )
        except IconMinifierError as e:
            logger.error(f"Failed to process {reference}: {e}")
            summary.failures[reference] = str(e)
            continue

        if report is not None:
            summary.reports.append(report)
            logger.info(f"Finished {reference}")

    if summary.failures:
        logger.error(f"{len(summary.failures)} stylesheet(s) failed")
    return summary
