"""
Exceptions raised while minifying a stylesheet.

Any of these aborts the stylesheet being processed; the pass moves on to the next one.
"""


class IconMinifierError(Exception):
    """Base class for minification failures."""


class AmbiguousIconError(IconMinifierError):
    """A class combination names more than one known icon class."""

    def __init__(self, classes):
        self.classes = list(classes)
        super().__init__(
            f"Detected icon with more than one icon class: {' '.join(self.classes)}"
        )


class MissingCodepointError(IconMinifierError):
    """A crawled icon class has no codepoint in the stylesheet."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No codepoint found for {name}")


class MissingGlyphError(IconMinifierError):
    """The font selected for an icon has no glyph at its codepoint."""

    def __init__(self, name: str, codepoint: int):
        self.name = name
        self.codepoint = codepoint
        super().__init__(f"Could not find glyphs for {codepoint:x} ({name})")


class AmbiguousVariantError(IconMinifierError):
    """An icon's modifiers select more than one font face."""

    def __init__(self, selector: str, faces: list[str]):
        self.selector = selector
        self.faces = faces
        super().__init__(
            f"Icon {selector} matches more than one font face: {'; '.join(faces)}"
        )


class NoActiveFontFacesError(IconMinifierError):
    """No @font-face in the stylesheet is selected by any class."""

    def __init__(self, stylesheet: str):
        self.stylesheet = stylesheet
        super().__init__(f"No font faces associated with classes in {stylesheet}")


class FetchError(IconMinifierError):
    """A stylesheet or font could not be read."""

    def __init__(self, location: str, reason: str, status: int | None = None):
        self.location = location
        self.reason = reason
        self.status = status
        detail = f" ({status})" if status is not None else ""
        super().__init__(f"Bad response for {location}{detail}: {reason}")


class FontLoadError(IconMinifierError):
    """None of a font face's sources could be decoded."""

    def __init__(self, face: str, sources: list[str]):
        self.face = face
        self.sources = sources
        tried = ", ".join(sources) or "(no sources)"
        super().__init__(f"Could not load any font for {face}: tried {tried}")


class CodepointRangeError(IconMinifierError):
    """The codepoint counter ran past the last Unicode codepoint."""

    def __init__(self, codepoint: int):
        self.codepoint = codepoint
        super().__init__(f"No codepoints left after {codepoint - 1:#x}")
