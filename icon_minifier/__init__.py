"""
Icon webfont minifier.

Shrinks an icon font and its stylesheet down to the glyphs a static site uses.
"""

__version__ = "0.1.0"
