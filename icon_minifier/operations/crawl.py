"""
Site crawling.

Indexes the files of a static site and scans them with regular expressions
for icon stylesheet links and icon class combinations.
"""

import re
from collections.abc import Iterator
from pathlib import Path

from icon_minifier.config.fonts import ICON_STYLESHEET_PATTERNS
from icon_minifier.core.icons import normalize_combinations
from icon_minifier.utils.logging import logger


def iter_site_files(directory: Path, exts: list[str]) -> Iterator[Path]:
    """
    Iterate over files with the given extensions, sorted by path.

    Args:
        directory: Site root
        exts: Extensions without the dot
    """
    wanted = set(exts)
    files = sorted(p for p in directory.rglob("*") if p.is_file())
    return iter(f for f in files if f.suffix[1:] in wanted)


def icon_pattern(prefix: str, extra_classes: list[str] | None = None) -> re.Pattern:
    """
    Regex matching whitespace-separated runs of icon-ish classes.

    A class is either the prefix followed by [a-z0-9-]+ or one of the extra
    classes (used for oddball classes such as `fab` that lack the prefix).
    """
    alternatives = [f"{re.escape(prefix)}[a-z0-9\\-]+"]
    # Longer extras first so `fab` is not cut short at `fa`
    for cls in sorted(set(extra_classes or []), key=len, reverse=True):
        alternatives.append(re.escape(cls))
    cls_pattern = f"(?:{'|'.join(alternatives)})"
    return re.compile(rf"\b{cls_pattern}(?:\s+{cls_pattern})*\b")


class SiteCrawler:
    """Files of a static site, grouped by extension."""

    def __init__(self):
        self.file_map: dict[str, list[Path]] = {}

    @property
    def file_count(self) -> int:
        return sum(len(files) for files in self.file_map.values())

    def index_files(self, directory: Path, exts: list[str]) -> None:
        """Index files under directory with the given extensions."""
        for ext in exts:
            self.file_map.setdefault(ext, [])
        for path in iter_site_files(Path(directory), exts):
            files = self.file_map[path.suffix[1:]]
            if path not in files:
                files.append(path)

        logger.info(f"Indexed {self.file_count} files")

    def _check_indexed(self, exts: list[str]) -> None:
        for ext in exts:
            if ext not in self.file_map:
                raise ValueError(f"Unknown extension {ext}: not indexed")

    def _iter_contents(self, exts: list[str]) -> Iterator[tuple[Path, str]]:
        self._check_indexed(exts)
        for ext in exts:
            for path in self.file_map[ext]:
                yield path, path.read_text(encoding="utf-8", errors="replace")

    def find_by_regex(self, pattern: re.Pattern, exts: list[str]) -> list[str]:
        """All matches of a pattern across indexed files, in file order."""
        results = []
        for _, contents in self._iter_contents(exts):
            results.extend(m.group(0) for m in pattern.finditer(contents))
        return results

    def find_css_files(self, exts: list[str]) -> list[tuple[Path, str]]:
        """
        Icon library stylesheets referenced from markup.

        Returns:
            Unique (page, reference) pairs in file order, with each quoted
            reference ending in .css kept as written (query strings included)
        """
        patterns = [
            re.compile(rf'(?<=")[^"]*{name}[^"]*\.css[^"]*(?=")')
            for name in ICON_STYLESHEET_PATTERNS
        ]
        links: dict[tuple[Path, str], None] = {}
        for path, contents in self._iter_contents(exts):
            for pattern in patterns:
                for match in pattern.finditer(contents):
                    links.setdefault((path, match.group(0)))
        return list(links)

    def find_icons(
        self, prefix: str, exts: list[str], extra_classes: list[str] | None = None
    ) -> list[list[str]]:
        """
        Crawl files for icon class combinations.

        Returns:
            Unique combinations with classes sorted, e.g. ["fa-google", "fab"]
        """
        matches = self.find_by_regex(icon_pattern(prefix, extra_classes), exts)
        return normalize_combinations(matches)

    def replace_css_links(
        self,
        exts: list[str],
        old_url: str,
        new_url: str,
        pages: list[Path] | None = None,
    ) -> int:
        """
        Point stylesheet references at a new URL, rewriting files in place.

        Files are rewritten as bytes so their encoding is left untouched.

        Args:
            exts: Extensions to rewrite
            old_url: Reference as written in the markup
            new_url: Replacement reference
            pages: Only rewrite these files (all indexed files if omitted)

        Returns:
            Number of files changed
        """
        self._check_indexed(exts)
        old, new = old_url.encode("utf-8"), new_url.encode("utf-8")
        changed = 0
        for ext in exts:
            for path in self.file_map[ext]:
                if pages is not None and path not in pages:
                    continue
                data = path.read_bytes()
                if old not in data:
                    continue
                path.write_bytes(data.replace(old, new))
                logger.info(f"Replaced stylesheet link in {path}")
                changed += 1
        return changed
