"""Declarative rewrite rules for source elements.

Rules are evaluated top to bottom and the first match decides what happens
to an element:

* ``emit``        build an output element, descend into the source children
                  under it, then close it
* ``transparent`` drop the element but keep its content at the current
                  insertion point
* ``list``        hand the paragraph to the list assembler

Anything no rule names is transparent.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeAlias

from bs4 import BeautifulSoup, Tag

from ibconvert.citation_fields import CITE_CLASS, INFO_ATTR, make_cite_span
from ibconvert.html_utils import has_class, style_contains
from ibconvert.list_assembler import list_role

RuleAction: TypeAlias = Literal["emit", "transparent", "list"]
NodePredicate: TypeAlias = Callable[[Tag], bool]
NodeBuilder: TypeAlias = Callable[[BeautifulSoup, Tag], Tag]

MARKER_CLASS = "Inkling"
SMALL_CAPS_STYLE = "small-caps"
SMALL_CAPS_CLASS = "small-caps"

HEADING_TAGS: frozenset[str] = frozenset(f"h{n}" for n in range(1, 7))
TABLE_TAGS: frozenset[str] = frozenset({"table", "thead", "tbody", "tr", "td", "th"})
EMPHASIS_TAGS: frozenset[str] = frozenset({"i", "b", "em", "strong"})
LIST_TAGS: frozenset[str] = frozenset({"ol", "ul", "li"})


@dataclass(frozen=True, slots=True)
class NodeRule:
    """One ``(tag, predicate) -> action`` entry."""

    name: str
    tags: frozenset[str]
    action: RuleAction
    predicate: NodePredicate | None = None
    build: NodeBuilder | None = None

    def matches(self, tag: Tag) -> bool:
        if tag.name not in self.tags:
            return False
        return self.predicate is None or self.predicate(tag)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _is_list_paragraph(tag: Tag) -> bool:
    return list_role(tag) is not None


def _is_marker_paragraph(tag: Tag) -> bool:
    return has_class(tag, MARKER_CLASS)


def _is_small_caps(tag: Tag) -> bool:
    return style_contains(tag, SMALL_CAPS_STYLE)


def _is_canonical_cite(tag: Tag) -> bool:
    return has_class(tag, CITE_CLASS) and bool(tag.get(INFO_ATTR))


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _same_name(document: BeautifulSoup, tag: Tag) -> Tag:
    return document.new_tag(tag.name)


def _plain_paragraph(document: BeautifulSoup, tag: Tag) -> Tag:
    return document.new_tag("p")


def _marker_paragraph(document: BeautifulSoup, tag: Tag) -> Tag:
    return document.new_tag("p", attrs={"class": MARKER_CLASS})


def _small_caps_span(document: BeautifulSoup, tag: Tag) -> Tag:
    return document.new_tag("span", attrs={"class": SMALL_CAPS_CLASS})


def _canonical_cite(document: BeautifulSoup, tag: Tag) -> Tag:
    return make_cite_span(document, str(tag.get(INFO_ATTR)))


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

NODE_RULES: tuple[NodeRule, ...] = (
    NodeRule("marker-paragraph", frozenset({"p"}), "emit",
             _is_marker_paragraph, _marker_paragraph),
    NodeRule("list-paragraph", frozenset({"p"}), "list", _is_list_paragraph),
    NodeRule("paragraph", frozenset({"p"}), "emit", build=_plain_paragraph),
    NodeRule("small-caps", frozenset({"span"}), "emit",
             _is_small_caps, _small_caps_span),
    NodeRule("canonical-cite", frozenset({"span"}), "emit",
             _is_canonical_cite, _canonical_cite),
    NodeRule("span", frozenset({"span"}), "transparent"),
    NodeRule("heading", HEADING_TAGS, "emit", build=_same_name),
    NodeRule("table", TABLE_TAGS, "emit", build=_same_name),
    NodeRule("emphasis", EMPHASIS_TAGS, "emit", build=_same_name),
    NodeRule("list", LIST_TAGS, "emit", build=_same_name),
)

UNRECOGNIZED = NodeRule("unrecognized", frozenset(), "transparent")


def match_rule(tag: Tag, rules: tuple[NodeRule, ...] = NODE_RULES) -> NodeRule:
    """Return the first rule matching *tag*, or :data:`UNRECOGNIZED`."""
    for rule in rules:
        if rule.matches(tag):
            return rule
    return UNRECOGNIZED
