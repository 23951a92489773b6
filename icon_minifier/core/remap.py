"""
Glyph subsetting and codepoint remapping.

Picks the font face that supplies each required icon, copies its glyph into
a packed list under a freshly allocated codepoint, and records which CSS
selectors point at each new codepoint.
"""

from dataclasses import dataclass, field

from icon_minifier.config.fonts import MAX_CODEPOINT, PUA_BASE, SURROGATES
from icon_minifier.config.options import AmbiguousVariantPolicy
from icon_minifier.core.font_io import Glyph
from icon_minifier.core.fontface import FontFaceTable
from icon_minifier.core.icons import Icon
from icon_minifier.errors import (
    AmbiguousVariantError,
    CodepointRangeError,
    MissingCodepointError,
    MissingGlyphError,
    NoActiveFontFacesError,
)
from icon_minifier.utils.logging import logger


class CodepointAllocator:
    """
    Hands out consecutive codepoints starting at a base.

    Surrogates are stepped over, and running past U+10FFFF is an error.
    """

    def __init__(self, base: int = PUA_BASE):
        self.base = base
        self._next = base
        self._count = 0

    @property
    def next_value(self) -> int:
        return self._next

    @property
    def allocated(self) -> int:
        return self._count

    def allocate(self) -> int:
        """
        Next free codepoint.

        Raises:
            CodepointRangeError: If no codepoint is left
        """
        value = self._next
        if value in SURROGATES:
            value = SURROGATES.stop
        if value > MAX_CODEPOINT:
            raise CodepointRangeError(value)
        self._next = value + 1
        self._count += 1
        return value


@dataclass
class RemapResult:
    """Output of a remapping pass."""

    glyphs: list[Glyph] = field(default_factory=list)
    # New codepoint -> selectors, in allocation order
    selectors: dict[int, list[str]] = field(default_factory=dict)
    # Face index -> legacy codepoint -> new codepoint
    assignments: dict[int, dict[int, int]] = field(default_factory=dict)
    # Icons as registered, including ones derived for unmarked variants
    icons: list[Icon] = field(default_factory=list)

    def register(self, codepoint: int, icon: Icon) -> None:
        selectors = self.selectors.setdefault(codepoint, [])
        if icon.selector not in selectors:
            selectors.append(icon.selector)
        if icon not in self.icons:
            self.icons.append(icon)


class GlyphRemapper:
    """
    Maps icons onto a dense range of new codepoints.

    Each (face, legacy codepoint) pair is copied into the packed glyph list
    at most once, however many icons refer to it.
    """

    def __init__(
        self,
        table: FontFaceTable,
        allocator: CodepointAllocator | None = None,
        policy: AmbiguousVariantPolicy = AmbiguousVariantPolicy.FIRST,
    ):
        self.table = table
        self.allocator = allocator or CodepointAllocator()
        self.policy = policy

    def remap(self, icons: list[Icon], class_codepoints: dict[str, int]) -> RemapResult:
        """
        Resolve every icon to a glyph and a new codepoint.

        Fonts of the active faces must already be loaded.

        Args:
            icons: Required icons
            class_codepoints: Icon class -> legacy codepoint

        Returns:
            Packed glyphs and the new codepoint -> selector table

        Raises:
            NoActiveFontFacesError: If no face is associated with a class
            MissingCodepointError: If an icon class has no codepoint
            MissingGlyphError: If the selected face lacks the icon's glyph
            AmbiguousVariantError: If policy is ERROR and an icon selects several faces
            CodepointRangeError: If the codepoint counter is exhausted
        """
        active = self.table.active
        if not active:
            raise NoActiveFontFacesError(self.table.stylesheet)

        result = RemapResult(assignments={index: {} for index in active})

        for icon in dict.fromkeys(icons):
            legacy = class_codepoints.get(icon.name)
            if legacy is None:
                raise MissingCodepointError(icon.name)

            if not self.table.is_multi_variant:
                self._resolve_direct(result, active[0], icon, legacy)
                continue

            # Faces selected by the icon's own variant classes, in declaration order
            matched = sorted(
                {self.table.by_class[m] for m in icon.modifiers if m in self.table.by_class}
            )
            if not matched:
                # No variant class given; emit the icon for every face that has it
                self._expand(result, active, icon, legacy)
            elif len(matched) == 1:
                self._resolve_direct(result, matched[0], icon, legacy)
            elif self.policy is AmbiguousVariantPolicy.ERROR:
                raise AmbiguousVariantError(
                    icon.selector, [self.table.faces[i].label for i in matched]
                )
            elif self.policy is AmbiguousVariantPolicy.EXPAND_ALL:
                self._expand(result, matched, icon, legacy)
            else:
                self._resolve_direct(result, matched[0], icon, legacy)

        logger.info(
            f"Packed {len(result.glyphs)} glyphs for {len(result.icons)} icon selectors"
        )
        return result

    def _assign(self, result: RemapResult, index: int, legacy: int) -> int | None:
        """
        New codepoint for a face's legacy codepoint, copying the glyph on first use.

        Returns None if the face has no glyph at the legacy codepoint.
        """
        assigned = result.assignments[index]
        if legacy in assigned:
            return assigned[legacy]

        glyphs = self.table.faces[index].find_glyphs(legacy)
        if not glyphs:
            return None

        codepoint = self.allocator.allocate()
        assigned[legacy] = codepoint
        result.glyphs.append(
            glyphs[0].clone(name=f"uni{codepoint:04X}", unicode=[codepoint])
        )
        return codepoint

    def _resolve_direct(
        self, result: RemapResult, index: int, icon: Icon, legacy: int
    ) -> None:
        codepoint = self._assign(result, index, legacy)
        if codepoint is None:
            raise MissingGlyphError(icon.name, legacy)
        result.register(codepoint, icon)

    def _expand(
        self, result: RemapResult, indices: list[int], icon: Icon, legacy: int
    ) -> None:
        for index in indices:
            codepoint = self._assign(result, index, legacy)
            if codepoint is None:
                # Not every variant has every icon
                continue
            for cls in self.table.faces[index].classes:
                result.register(codepoint, icon.with_modifier(cls))
