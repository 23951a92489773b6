"""
Icon records and crawl normalization.

An icon is one name class from the stylesheet's icon set plus every other
class it was written with (variants, sizes, animations).
"""

from collections.abc import Iterable
from dataclasses import dataclass

from icon_minifier.errors import AmbiguousIconError
from icon_minifier.utils.logging import logger

# Number of evenly spaced samples used to infer the icon class prefix
PREFIX_SAMPLES = 4


def common_prefix(words: list[str]) -> str:
    """Longest leading substring shared by every word."""
    if not words:
        return ""
    i = 0
    while all(i < len(w) for w in words) and all(w[i] == words[0][i] for w in words):
        i += 1
    return words[0][:i]


def infer_prefix(icon_classes: Iterable[str]) -> str:
    """
    Infer the icon class prefix (e.g. "fa-") of a stylesheet.

    Samples classes at every quarter of the list rather than comparing them
    all, so that neighbouring icons with similar names don't stretch the
    prefix, and a few oddball names don't shrink it to nothing.

    Args:
        icon_classes: Icon classes in the order they appear in the stylesheet
    """
    classes = list(icon_classes)
    if not classes:
        return ""
    n = len(classes)
    samples = [classes[i * n // PREFIX_SAMPLES] for i in range(PREFIX_SAMPLES)]
    return common_prefix(samples)


def normalize_combinations(raw: Iterable[str]) -> list[list[str]]:
    """
    Canonicalize crawled class combinations.

    Classes are sorted so `fab fa-google` and `fa-google fab` collapse into
    one combination. First-seen order of combinations is kept.
    """
    canonical = dict.fromkeys(" ".join(sorted(match.split())) for match in raw)
    return [key.split(" ") for key in canonical if key]


@dataclass(frozen=True)
class Icon:
    """A required glyph: one icon class plus modifier classes."""

    name: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "modifiers", tuple(sorted(set(self.modifiers))))

    @classmethod
    def parse(cls, classes: list[str], icon_classes) -> "Icon | None":
        """
        Classify a class combination.

        Args:
            classes: Classes written together on one element
            icon_classes: Known icon classes of the stylesheet

        Returns:
            Icon, or None if no class names an icon

        Raises:
            AmbiguousIconError: If more than one class names an icon
        """
        names = [c for c in classes if c in icon_classes]
        if len(names) > 1:
            raise AmbiguousIconError(names)
        if not names:
            logger.info(f"Detected icon with no name: {' '.join(classes)} (skipping)")
            return None

        name = names[0]
        return cls(name, tuple(c for c in classes if c != name))

    def with_modifier(self, modifier: str) -> "Icon":
        """Copy of this icon with one more modifier class."""
        return Icon(self.name, self.modifiers + (modifier,))

    @property
    def classes(self) -> list[str]:
        return [self.name, *self.modifiers]

    @property
    def selector(self) -> str:
        """Compound class selector, e.g. `.fa-home.fa`."""
        return "".join(f".{c}" for c in self.classes)


def parse_icons(combinations: list[list[str]], icon_classes) -> list[Icon]:
    """Parse combinations into unique icons, dropping those without a name."""
    icons: dict[Icon, None] = {}
    for classes in combinations:
        icon = Icon.parse(classes, icon_classes)
        if icon is not None:
            icons.setdefault(icon)
    return list(icons)
