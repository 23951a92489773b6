"""Tests for glyph subsetting and codepoint remapping."""

import posixpath

import pytest

from icon_minifier.config.options import AmbiguousVariantPolicy
from icon_minifier.core.css import class_codepoints, parse_rules
from icon_minifier.core.fontface import associate_font_faces
from icon_minifier.core.icons import Icon, parse_icons
from icon_minifier.core.remap import CodepointAllocator, GlyphRemapper
from icon_minifier.errors import (
    AmbiguousIconError,
    AmbiguousVariantError,
    CodepointRangeError,
    MissingCodepointError,
    MissingGlyphError,
    NoActiveFontFacesError,
)

SINGLE_FACE_CSS = """
@font-face {
  font-family: "X";
  font-style: normal;
  font-weight: 400;
  src: url(../fonts/x.ttf) format("truetype");
}
.fa { font-family: "X"; }
.fa-home:before { content: "\\f015"; }
.fa-user:before { content: "\\f007"; }
.fa-lost:before { content: "\\f000"; }
"""

BRANDS_SOLID_CSS = """
@font-face { font-family: "FA Brands"; font-style: normal; font-weight: 400; src: url(brands.ttf); }
@font-face { font-family: "FA Free"; font-style: normal; font-weight: 900; src: url(solid.ttf); }
.fab { font-family: "FA Brands"; }
.fas { font-family: "FA Free"; font-weight: 900; }
.fa-google::before { content: "\\f1a0"; }
.fa-star::before { content: "\\f005"; }
"""


def load_table(css, fonts):
    """Parse a stylesheet and load its faces from a name -> bytes dict."""
    rules = parse_rules(css)
    table = associate_font_faces(rules, "/site/css/icons.css")
    table.load_fonts(lambda source: fonts[posixpath.basename(source)])
    return table, class_codepoints(rules)


@pytest.fixture
def single_face(icon_font):
    return load_table(SINGLE_FACE_CSS, {"x.ttf": icon_font([0xF007, 0xF015])})


@pytest.fixture
def brands_solid(icon_font):
    fonts = {
        "brands.ttf": icon_font([0xF1A0, 0xF005], advance_width=640),
        "solid.ttf": icon_font([0xF005], advance_width=500),
    }
    return load_table(BRANDS_SOLID_CSS, fonts)


def test_codepoint_allocator():
    """Test that the allocator counts up from its base."""
    allocator = CodepointAllocator(0xE100)
    assert [allocator.allocate() for _ in range(3)] == [0xE100, 0xE101, 0xE102]
    assert allocator.next_value == 0xE103
    assert allocator.allocated == 3


def test_codepoint_allocator_steps_over_surrogates():
    """Test that the allocator never hands out a surrogate."""
    allocator = CodepointAllocator(0xD7FF)
    assert [allocator.allocate() for _ in range(3)] == [0xD7FF, 0xE000, 0xE001]
    assert allocator.allocated == 3

    assert CodepointAllocator(0xD900).allocate() == 0xE000


def test_codepoint_allocator_stops_at_last_codepoint():
    """Test that allocating past U+10FFFF raises."""
    allocator = CodepointAllocator(0x10FFFF)
    assert allocator.allocate() == 0x10FFFF

    with pytest.raises(CodepointRangeError, match="0x10ffff"):
        allocator.allocate()
    assert allocator.allocated == 1


def test_single_face_scenario(single_face):
    """Test two icons from one face get consecutive codepoints from the base."""
    table, codepoints = single_face
    icons = parse_icons([["fa", "fa-home"], ["fa", "fa-user"]], set(codepoints))

    result = GlyphRemapper(table, CodepointAllocator(0xE000)).remap(icons, codepoints)

    assert icons == [Icon("fa-home", ("fa",)), Icon("fa-user", ("fa",))]
    assert result.selectors == {0xE000: [".fa-home.fa"], 0xE001: [".fa-user.fa"]}
    assert [g.unicode for g in result.glyphs] == [[0xE000], [0xE001]]
    assert [g.name for g in result.glyphs] == ["uniE000", "uniE001"]
    assert result.assignments == {0: {0xF015: 0xE000, 0xF007: 0xE001}}


def test_same_glyph_is_copied_once(single_face):
    """Test that icons sharing a legacy codepoint share one packed glyph."""
    table, codepoints = single_face
    icons = [Icon("fa-home", ("fa",)), Icon("fa-home", ("fa", "fa-lg")), Icon("fa-home")]

    result = GlyphRemapper(table).remap(icons, codepoints)

    assert len(result.glyphs) == 1
    assert result.selectors == {0xE000: [".fa-home.fa", ".fa-home.fa.fa-lg", ".fa-home"]}


def test_every_codepoint_has_glyph_and_selectors(brands_solid):
    """Test that selector codepoints and packed glyph codepoints coincide."""
    table, codepoints = brands_solid
    icons = [Icon("fa-google", ("fab",)), Icon("fa-star"), Icon("fa-star", ("fas",))]

    result = GlyphRemapper(table).remap(icons, codepoints)

    packed = {cp for glyph in result.glyphs for cp in glyph.unicode}
    assert packed == set(result.selectors)
    assert all(result.selectors.values())


def test_variant_class_selects_face(brands_solid):
    """Test that a variant class restricts the icon to its face."""
    table, codepoints = brands_solid

    result = GlyphRemapper(table).remap([Icon("fa-google", ("fab",))], codepoints)

    assert result.selectors == {0xE000: [".fa-google.fab"]}
    assert result.glyphs[0].advance_width == 640
    assert result.assignments == {0: {0xF1A0: 0xE000}, 1: {}}


def test_unmarked_icon_expands_to_every_face(brands_solid):
    """Test that an icon without a variant class is emitted once per face."""
    table, codepoints = brands_solid

    result = GlyphRemapper(table).remap([Icon("fa-star")], codepoints)

    assert result.selectors == {0xE000: [".fa-star.fab"], 0xE001: [".fa-star.fas"]}
    assert [g.advance_width for g in result.glyphs] == [640, 500]
    assert result.icons == [Icon("fa-star", ("fab",)), Icon("fa-star", ("fas",))]


def test_expansion_skips_faces_without_glyph(brands_solid):
    """Test that expansion ignores faces missing the codepoint."""
    table, codepoints = brands_solid

    result = GlyphRemapper(table).remap([Icon("fa-google")], codepoints)

    assert result.selectors == {0xE000: [".fa-google.fab"]}


def test_expansion_reuses_direct_assignments(brands_solid):
    """Test that expansion and direct lookups share per-face assignments."""
    table, codepoints = brands_solid
    icons = [Icon("fa-star", ("fas",)), Icon("fa-star")]

    result = GlyphRemapper(table).remap(icons, codepoints)

    assert len(result.glyphs) == 2
    assert result.selectors == {0xE000: [".fa-star.fas"], 0xE001: [".fa-star.fab"]}


def test_ambiguous_icon_combination_is_fatal(single_face):
    """Test that a combination naming two icons aborts."""
    table, codepoints = single_face
    with pytest.raises(AmbiguousIconError):
        parse_icons([["fa-home", "fa-user"]], set(codepoints))


def test_nameless_combination_consumes_no_codepoint(single_face):
    """Test that combinations without an icon class are dropped."""
    table, codepoints = single_face
    allocator = CodepointAllocator()
    icons = parse_icons([["fa"], ["fa", "fa-home"]], set(codepoints))

    GlyphRemapper(table, allocator).remap(icons, codepoints)

    assert icons == [Icon("fa-home", ("fa",))]
    assert allocator.allocated == 1


@pytest.mark.parametrize(
    "policy, expected",
    [
        (AmbiguousVariantPolicy.FIRST, {0xE000: [".fa-star.fab.fas"]}),
        (
            AmbiguousVariantPolicy.EXPAND_ALL,
            {0xE000: [".fa-star.fab.fas"], 0xE001: [".fa-star.fab.fas"]},
        ),
    ],
)
def test_multiple_variant_classes_policy(brands_solid, policy, expected):
    """Test icons carrying two variant classes under each policy."""
    table, codepoints = brands_solid

    result = GlyphRemapper(table, policy=policy).remap(
        [Icon("fa-star", ("fab", "fas"))], codepoints
    )

    assert result.selectors == expected


def test_multiple_variant_classes_error_policy(brands_solid):
    """Test that the error policy rejects icons selecting two faces."""
    table, codepoints = brands_solid
    remapper = GlyphRemapper(table, policy=AmbiguousVariantPolicy.ERROR)

    with pytest.raises(AmbiguousVariantError, match="FA Brands"):
        remapper.remap([Icon("fa-star", ("fab", "fas"))], codepoints)


def test_missing_glyph_raises(single_face):
    """Test that a selected face lacking the glyph aborts."""
    table, codepoints = single_face
    with pytest.raises(MissingGlyphError, match="f000"):
        GlyphRemapper(table).remap([Icon("fa-lost", ("fa",))], codepoints)


def test_missing_codepoint_raises(single_face):
    """Test that an icon unknown to the stylesheet aborts."""
    table, codepoints = single_face
    with pytest.raises(MissingCodepointError):
        GlyphRemapper(table).remap([Icon("fa-ghost")], codepoints)


def test_no_active_faces_raises():
    """Test that a stylesheet without associated faces aborts."""
    rules = parse_rules('.fa-home::before { content: "\\f015" }')
    table = associate_font_faces(rules, "/site/css/icons.css")

    with pytest.raises(NoActiveFontFacesError):
        GlyphRemapper(table).remap([Icon("fa-home")], class_codepoints(rules))


def test_shared_allocator_continues_numbering(single_face):
    """Test that a shared allocator keeps counting across passes."""
    table, codepoints = single_face
    allocator = CodepointAllocator()

    GlyphRemapper(table, allocator).remap([Icon("fa-home")], codepoints)
    second = GlyphRemapper(table, allocator).remap([Icon("fa-user")], codepoints)

    assert list(second.selectors) == [0xE001]


def test_variant_classes_resolve_in_declaration_order(brands_solid):
    """Test that the first declared face wins whatever the modifier order."""
    table, codepoints = brands_solid

    result = GlyphRemapper(table).remap([Icon("fa-star", ("fas", "fab"))], codepoints)

    assert result.assignments == {0: {0xF005: 0xE000}, 1: {}}
    assert result.glyphs[0].advance_width == 640


def test_modifier_without_face_is_not_a_variant(brands_solid):
    """Test that only associated classes restrict an icon to a face."""
    table, codepoints = brands_solid

    result = GlyphRemapper(table).remap([Icon("fa-star", ("fa-spin", "fas"))], codepoints)

    assert result.selectors == {0xE000: [".fa-star.fa-spin.fas"]}
    assert result.glyphs[0].advance_width == 500


def test_exhausted_codepoints_abort_remap(single_face):
    """Test that running out of codepoints fails the pass."""
    table, codepoints = single_face
    icons = [Icon("fa-home", ("fa",)), Icon("fa-user", ("fa",))]
    remapper = GlyphRemapper(table, CodepointAllocator(0x10FFFF))

    with pytest.raises(CodepointRangeError):
        remapper.remap(icons, codepoints)
