"""
Stylesheet rule and selector reading.

Turns stylesheet text into flat (selector, body) rules and pulls class names
and font declarations out of them. Built on tinycss2 tokens; this is not a
full selector engine.
"""

from dataclasses import dataclass
from functools import lru_cache

import tinycss2
from tinycss2.ast import (
    FunctionBlock,
    HashToken,
    IdentToken,
    LiteralToken,
    NumberToken,
    SquareBracketsBlock,
    StringToken,
    URLToken,
    WhitespaceToken,
)

from icon_minifier.config.fonts import FONT_STYLES, FONT_WEIGHTS
from icon_minifier.utils.logging import logger

# Pseudo-elements that may be written with a single colon
LEGACY_PSEUDO_ELEMENTS = {"before", "after", "first-line", "first-letter"}


@dataclass(frozen=True)
class Rule:
    """One CSS rule or at-rule as it appears in the stylesheet."""

    selector: str
    body: str

    @property
    def is_at_rule(self) -> bool:
        return self.selector.startswith("@")

    @property
    def is_pseudo(self) -> bool:
        return self.selector.startswith(":")


def parse_rules(text: str) -> list[Rule]:
    """
    Parse stylesheet text into top-level rules.

    Comments are dropped. At-rules keep their keyword and prelude as the
    selector (e.g. "@font-face", "@keyframes fa-spin").

    Args:
        text: Stylesheet source

    Returns:
        Rules in source order
    """
    rules = []
    for node in tinycss2.parse_stylesheet(text, skip_comments=True, skip_whitespace=True):
        if node.type == "qualified-rule":
            selector = tinycss2.serialize(node.prelude).strip()
        elif node.type == "at-rule":
            prelude = tinycss2.serialize(node.prelude).strip()
            selector = f"@{node.lower_at_keyword} {prelude}".strip()
        else:
            logger.debug(f"Skipping unparsable stylesheet content: {node.message}")
            continue

        body = tinycss2.serialize(node.content).strip() if node.content else ""
        rules.append(Rule(selector, body))
    return rules


def _selector_items(selector: str) -> list[list[tuple[str, str]]]:
    """
    Split a selector list into comma groups of (kind, name) items.

    Whitespace between compounds becomes a descendant combinator item.
    """
    groups: list[list[tuple[str, str]]] = [[]]
    tokens = tinycss2.parse_component_value_list(selector, skip_comments=True)
    pending_space = False

    i = 0
    while i < len(tokens):
        token = tokens[i]
        items = groups[-1]

        if isinstance(token, WhitespaceToken):
            pending_space = bool(items) and items[-1][0] != "combinator"
            i += 1
            continue

        if isinstance(token, LiteralToken) and token.value == ",":
            groups.append([])
            pending_space = False
            i += 1
            continue

        if isinstance(token, LiteralToken) and token.value in (">", "+", "~"):
            items.append(("combinator", token.value))
            pending_space = False
            i += 1
            continue

        if pending_space:
            items.append(("combinator", " "))
            pending_space = False

        nxt = tokens[i + 1] if i + 1 < len(tokens) else None

        if isinstance(token, LiteralToken) and token.value == ".":
            if isinstance(nxt, IdentToken):
                items.append(("class", nxt.value))
                i += 2
                continue
        elif isinstance(token, LiteralToken) and token.value == ":":
            if isinstance(nxt, LiteralToken) and nxt.value == ":":
                name = tokens[i + 2] if i + 2 < len(tokens) else None
                if isinstance(name, (IdentToken, FunctionBlock)):
                    items.append(("pseudo-element", _token_name(name)))
                    i += 3
                    continue
            elif isinstance(nxt, (IdentToken, FunctionBlock)):
                name = _token_name(nxt)
                kind = "pseudo-element" if name in LEGACY_PSEUDO_ELEMENTS else "pseudo-class"
                items.append((kind, name))
                i += 2
                continue
        elif isinstance(token, IdentToken):
            items.append(("type", token.lower_value))
        elif isinstance(token, HashToken):
            items.append(("id", token.value))
        elif isinstance(token, SquareBracketsBlock):
            items.append(("attribute", tinycss2.serialize(token.content)))
        elif isinstance(token, LiteralToken) and token.value == "*":
            items.append(("universal", "*"))
        else:
            items.append(("other", tinycss2.serialize([token])))
        i += 1

    return [group for group in groups if group]


def _token_name(token) -> str:
    if isinstance(token, FunctionBlock):
        return token.lower_name
    return token.lower_value


def extract_classes(selector: str) -> list[str]:
    """
    Class names used in a selector, in order of appearance.

    At-rules and bare pseudo-selectors (":root", ":is(...)") yield nothing.
    Classes nested in functional pseudo-classes like ":not(.x)" are ignored.
    """
    stripped = selector.lstrip()
    if stripped.startswith("@") or stripped.startswith(":"):
        return []

    classes: list[str] = []
    for group in _selector_items(stripped):
        for kind, name in group:
            if kind == "class" and name not in classes:
                classes.append(name)
    return classes


def extract_classes_before_only(selector: str) -> list[str]:
    """
    Classes of selector groups written exactly as ".class::before".

    This is the shape icon glyph declarations take. Longer groups are skipped
    with a diagnostic rather than guessed at.
    """
    stripped = selector.lstrip()
    if stripped.startswith("@") or stripped.startswith(":"):
        return []

    classes: list[str] = []
    for group in _selector_items(stripped):
        if len(group) > 2:
            logger.debug(f"Skipped complex rule in selector: {selector}")
            continue
        if (
            len(group) == 2
            and group[0][0] == "class"
            and group[1] == ("pseudo-element", "before")
        ):
            classes.append(group[0][1])
    return classes


@lru_cache(maxsize=4096)
def _declarations(body: str) -> tuple[tuple[str, tuple], ...]:
    """Parse a rule body into (lowercased property, value tokens) pairs."""
    parsed = tinycss2.parse_declaration_list(body, skip_comments=True, skip_whitespace=True)
    return tuple(
        (decl.lower_name, tuple(decl.value))
        for decl in parsed
        if decl.type == "declaration"
    )


def _values(body: str, prop: str):
    """Value token lists of every declaration of prop, in order."""
    return [value for name, value in _declarations(body) if name == prop]


def _significant(tokens) -> list:
    return [t for t in tokens if not isinstance(t, WhitespaceToken) and t.type != "comment"]


def declares(body: str, prop: str) -> bool:
    """Whether the body declares the property."""
    return any(name == prop for name, _ in _declarations(body))


def font_family(body: str) -> str | None:
    """First family named by font-family, quoted or as bare identifiers."""
    for value in _values(body, "font-family"):
        tokens = _significant(value)
        if not tokens:
            continue
        if isinstance(tokens[0], StringToken):
            return tokens[0].value

        words = []
        for token in tokens:
            if isinstance(token, LiteralToken) and token.value == ",":
                break
            if not isinstance(token, IdentToken):
                # var() and other computed families cannot be matched
                words = []
                break
            words.append(token.value)
        if words:
            return " ".join(words)
    return None


def font_style(body: str) -> str | None:
    """The font-style keyword, if it is one of the supported styles."""
    for value in _values(body, "font-style"):
        tokens = _significant(value)
        if tokens and isinstance(tokens[0], IdentToken) and tokens[0].lower_value in FONT_STYLES:
            return tokens[0].lower_value
    return None


def font_weight(body: str) -> str | None:
    """
    The font-weight token, if it is one of the supported weights.

    A weight range such as "400 900" yields its first value.
    """
    for value in _values(body, "font-weight"):
        tokens = _significant(value)
        if not tokens:
            continue
        token = tokens[0]
        if isinstance(token, NumberToken) and token.is_integer:
            weight = str(token.int_value)
        elif isinstance(token, IdentToken):
            weight = token.lower_value
        else:
            continue
        if weight in FONT_WEIGHTS:
            return weight
    return None


def font_sources(body: str) -> list[str]:
    """
    URLs listed by src declarations, in order.

    local() references and inline data: URIs are skipped.
    """
    sources = []
    for value in _values(body, "src"):
        for token in value:
            url = None
            if isinstance(token, URLToken):
                url = token.value
            elif isinstance(token, FunctionBlock) and token.lower_name == "url":
                strings = [t for t in token.arguments if isinstance(t, StringToken)]
                if strings:
                    url = strings[0].value
            if url is None:
                continue
            url = url.strip()
            if url.startswith("data:"):
                logger.debug("Skipping inline data: font source")
                continue
            sources.append(url)
    return sources


def content_codepoint(body: str) -> int | None:
    """Codepoint of a single-character content string, e.g. content: "\\f015"."""
    for value in _values(body, "content"):
        tokens = _significant(value)
        if len(tokens) == 1 and isinstance(tokens[0], StringToken) and len(tokens[0].value) == 1:
            return ord(tokens[0].value)
    return None


def class_codepoints(rules: list[Rule]) -> dict[str, int]:
    """
    Map icon classes to their glyph codepoints.

    Reads ".class::before { content: "\\xxxx" }" rules. Keys keep the order
    in which classes are first encountered.
    """
    table: dict[str, int] = {}
    for rule in rules:
        codepoint = content_codepoint(rule.body)
        if codepoint is None:
            continue
        for cls in extract_classes_before_only(rule.selector):
            table[cls] = codepoint
    return table


def all_classes(rules: list[Rule]) -> list[str]:
    """Every class used by a non-at-rule, non-pseudo selector, in order."""
    seen: dict[str, None] = {}
    for rule in rules:
        for cls in extract_classes(rule.selector):
            seen.setdefault(cls)
    return list(seen)
