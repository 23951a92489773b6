"""
Font and stylesheet constants.

Enumerated CSS tokens accepted in @font-face blocks and variant rules,
plus the font formats the codec can read and write.
"""

FONT_STYLES = ("normal", "italic")

FONT_WEIGHTS = (
    "100",
    "200",
    "300",
    "400",
    "500",
    "600",
    "700",
    "800",
    "900",
    "bold",
    "bolder",
    "lighter",
    "normal",
)

# Keyword weights that name the same numeric weight; used for comparisons only
WEIGHT_ALIASES = {
    "normal": "400",
    "bold": "700",
}

# CSS initial values for a variant class that never declares them
DEFAULT_FONT_STYLE = "normal"
DEFAULT_FONT_WEIGHT = "normal"

# Source extensions fontTools can decode (eot and svg sources are skipped)
LOADABLE_FONT_EXTS = ("ttf", "otf", "woff", "woff2")

# Output format -> CSS format() hint
OUTPUT_FORMATS = {
    "woff2": "woff2",
    "woff": "woff",
    "ttf": "truetype",
}

# Start of the Basic Multilingual Plane Private Use Area
PUA_BASE = 0xE000
MAX_CODEPOINT = 0x10FFFF

# UTF-16 surrogates are not characters and cannot be mapped in a cmap
SURROGATES = range(0xD800, 0xE000)

# Stylesheet filename patterns of known icon libraries
ICON_STYLESHEET_PATTERNS = [
    "font-?awesome",
    "devicons?",
]
