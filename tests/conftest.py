"""Shared pytest fixtures."""

from io import BytesIO

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen


def make_icon_font(codepoints: list[int], advance_width: int = 500) -> bytes:
    """
    Build a small TrueType icon font with a square glyph at each codepoint.

    Square sizes differ per codepoint so copied outlines can be told apart.
    """
    names = [f"icon{cp:04X}" for cp in codepoints]
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef"] + names)
    fb.setupCharacterMap(dict(zip(codepoints, names)))

    glyphs = {".notdef": TTGlyphPen(None).glyph()}
    metrics = {".notdef": (500, 0)}
    for i, name in enumerate(names):
        size = 100 + 10 * i
        pen = TTGlyphPen(None)
        pen.moveTo((0, 0))
        pen.lineTo((0, size))
        pen.lineTo((size, size))
        pen.lineTo((size, 0))
        pen.closePath()
        glyphs[name] = pen.glyph()
        metrics[name] = (advance_width, 0)

    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": "Test Icons", "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupPost()

    buffer = BytesIO()
    fb.font.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def icon_font():
    """Factory for icon font bytes."""
    return make_icon_font


FONT_AWESOME_CSS = """
@font-face {
  font-family: "Font Awesome Brands";
  font-style: normal;
  font-weight: 400;
  src: url(../webfonts/fa-brands-400.eot);
  src: url(../webfonts/fa-brands-400.woff2) format("woff2"),
       url(../webfonts/fa-brands-400.ttf) format("truetype");
}
@font-face {
  font-family: "Font Awesome Free";
  font-style: normal;
  font-weight: 900;
  src: url(../webfonts/fa-solid-900.ttf) format("truetype");
}
@font-face {
  font-family: "Font Awesome Free";
  font-style: normal;
  font-weight: 400;
  src: url(../webfonts/fa-regular-400.ttf) format("truetype");
}
.fa, .fab, .fas, .far {
  -webkit-font-smoothing: antialiased;
  display: inline-block;
}
.fab { font-family: "Font Awesome Brands"; }
.fa, .fas { font-family: "Font Awesome Free"; font-weight: 900; }
.far { font-family: "Font Awesome Free"; font-weight: 400; }
.fa-spin { animation: fa-spin 2s infinite linear; }
.fa-lg { font-size: 1.333em; }
@keyframes fa-spin {
  0% { transform: rotate(0deg); }
  100% { transform: rotate(360deg); }
}
@keyframes fa-unused { to { opacity: 0; } }
.fa-google::before { content: "\\f1a0"; }
.fa-home::before { content: "\\f015"; }
.fa-star::before { content: "\\f005"; }
.fa-user::before { content: "\\f007"; }
"""


@pytest.fixture
def font_awesome_css():
    """Stylesheet with brands/solid/regular faces."""
    return FONT_AWESOME_CSS


@pytest.fixture
def fa_site(tmp_path):
    """
    Static site linking a local Font Awesome stylesheet.

    Brands has only fa-google; solid and regular have home, star, and user.
    Regular fonts are wider so glyph origins can be checked.
    """
    site = tmp_path / "site"
    (site / "vendor" / "css").mkdir(parents=True)
    (site / "vendor" / "webfonts").mkdir(parents=True)

    (site / "vendor" / "css" / "font-awesome.min.css").write_text(FONT_AWESOME_CSS)
    fonts = site / "vendor" / "webfonts"
    (fonts / "fa-brands-400.ttf").write_bytes(make_icon_font([0xF1A0], 640))
    (fonts / "fa-brands-400.woff2").write_bytes(b"not a font")
    (fonts / "fa-solid-900.ttf").write_bytes(make_icon_font([0xF005, 0xF007, 0xF015], 500))
    (fonts / "fa-regular-400.ttf").write_bytes(make_icon_font([0xF005, 0xF007, 0xF015], 560))

    (site / "index.html").write_text(
        "<html><head>"
        '<link rel="stylesheet" href="/vendor/css/font-awesome.min.css?v=5">'
        "</head><body>"
        '<i class="fab fa-google"></i>'
        '<i class="fa fa-home fa-spin"></i>'
        '<i class="fa-star far"></i>'
        "</body></html>"
    )
    (site / "about.html").write_text(
        '<html><head><link rel="stylesheet" href="/vendor/css/font-awesome.min.css?v=5">'
        '</head><body><i class="far fa-star"></i><span class="fas fa-home"></span>'
        "</body></html>"
    )
    return site
