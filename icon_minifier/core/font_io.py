"""
Font I/O utilities for decoding, glyph lookup, and writing icon fonts.
"""

import copy
from dataclasses import dataclass, replace
from io import BytesIO

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.cu2quPen import Cu2QuPen
from fontTools.pens.recordingPen import DecomposingRecordingPen, replayRecording
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.ttLib import TTFont

from icon_minifier.config.fonts import LOADABLE_FONT_EXTS, OUTPUT_FORMATS

# Maximum error (font units) when converting cubic outlines to quadratic
CU2QU_MAX_ERR = 1.0


@dataclass
class Glyph:
    """A glyph outline lifted out of a source font."""

    name: str
    unicode: list[int]
    advance_width: int
    lsb: int
    outline: list  # Recorded pen operations, components decomposed
    cubic: bool = False  # True for CFF outlines

    def clone(self, **changes) -> "Glyph":
        """Deep copy, optionally with some fields replaced."""
        glyph = replace(
            self,
            unicode=list(self.unicode),
            outline=copy.deepcopy(self.outline),
        )
        return replace(glyph, **changes)

    def draw(self, pen) -> None:
        """Replay the outline into a pen."""
        replayRecording(self.outline, pen)


def load_font(data: bytes, fmt: str) -> TTFont:
    """
    Decode a font from memory.

    fontTools detects the container itself; the format only rejects
    sources it cannot read (eot, svg).

    Args:
        data: Raw font file contents
        fmt: Source extension without the dot

    Returns:
        TTFont instance

    Raises:
        ValueError: If the format is not loadable
        TTLibError: If the data is not a font
    """
    if fmt not in LOADABLE_FONT_EXTS:
        raise ValueError(f"Unsupported font format: {fmt}")
    return TTFont(BytesIO(data))


def find_glyphs(font: TTFont, codepoint: int) -> list[Glyph]:
    """
    Look up the glyphs mapped to a codepoint.

    Returns fresh records; the font itself is never modified.
    An empty list means the font has no glyph for the codepoint.
    """
    cmap = font.getBestCmap() or {}
    glyph_name = cmap.get(codepoint)
    if glyph_name is None:
        return []

    glyph_set = font.getGlyphSet()
    pen = DecomposingRecordingPen(glyph_set)
    glyph_set[glyph_name].draw(pen)
    advance_width, lsb = font["hmtx"][glyph_name]

    return [
        Glyph(
            name=glyph_name,
            unicode=[codepoint],
            advance_width=advance_width,
            lsb=lsb,
            outline=pen.value,
            cubic="glyf" not in font,
        )
    ]


def build_font(template: TTFont, glyphs: list[Glyph], family_name: str) -> TTFont:
    """
    Assemble a TrueType font from packed glyphs.

    The template supplies units-per-em and vertical metrics; its glyph table
    is replaced wholly by the packed glyphs. Cubic outlines are converted to
    quadratic.

    Args:
        template: Loaded source font
        glyphs: Packed glyphs, each with a unique name and its new codepoint(s)
        family_name: Family name written to the name table

    Returns:
        New TTFont
    """
    units_per_em = template["head"].unitsPerEm
    hhea = template["hhea"]

    fb = FontBuilder(units_per_em, isTTF=True)
    fb.setupGlyphOrder([".notdef"] + [g.name for g in glyphs])
    fb.setupCharacterMap({cp: g.name for g in glyphs for cp in g.unicode})

    tt_glyphs = {".notdef": TTGlyphPen(None).glyph()}
    metrics = {".notdef": (units_per_em // 2, 0)}
    for glyph in glyphs:
        tt_pen = TTGlyphPen(None)
        glyph.draw(
            Cu2QuPen(tt_pen, CU2QU_MAX_ERR, reverse_direction=glyph.cubic)
        )
        tt_glyphs[glyph.name] = tt_pen.glyph()
        metrics[glyph.name] = (glyph.advance_width, glyph.lsb)

    fb.setupGlyf(tt_glyphs)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=hhea.ascent, descent=hhea.descent)
    fb.setupNameTable({"familyName": family_name, "styleName": "Regular"})
    fb.setupOS2(
        sTypoAscender=hhea.ascent,
        sTypoDescender=hhea.descent,
        usWinAscent=hhea.ascent,
        usWinDescent=abs(hhea.descent),
    )
    fb.setupPost()
    return fb.font


def write_font(font: TTFont, fmt: str) -> bytes:
    """
    Serialize a font in one of the output formats (ttf, woff, woff2).

    Raises:
        ValueError: If the format is not supported
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {fmt}")

    buffer = BytesIO()
    font.flavor = None if fmt == "ttf" else fmt
    try:
        font.save(buffer)
    finally:
        font.flavor = None
    return buffer.getvalue()
