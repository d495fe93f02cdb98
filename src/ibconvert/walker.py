"""Depth-first rewrite of a Word HTML tree into a normalized output tree.

The walker reads the source tree and never modifies it.  Output nodes are
appended to the node on top of an explicit cursor stack; the stack always
holds the output root at the bottom.  Every element the walker emits is
pushed before its children are visited and popped afterwards.  The list
assembler is the one caller that keeps nodes open across sibling
paragraphs, and it closes them when its run ends.
"""
from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import PageElement

from ibconvert.citation_fields import CitationFieldDecoder
from ibconvert.html_utils import collapse_text, style_contains
from ibconvert.list_assembler import ListAssembler, list_role
from ibconvert.node_rules import NODE_RULES, NodeRule, match_rule

log = logging.getLogger(__name__)

# Word bookkeeping spans (rendered list numbers and bullets).
LIST_IGNORE_STYLE = "mso-list:Ignore"


class TreeWalker:
    def __init__(
        self,
        document: BeautifulSoup,
        decoder: CitationFieldDecoder,
        *,
        root: Tag | None = None,
        rules: tuple[NodeRule, ...] = NODE_RULES,
    ) -> None:
        if root is None:
            root = document.body
        if root is None:
            raise ValueError("output document has no <body> to write into")
        self.document = document
        self.decoder = decoder
        self.rules = rules
        self.root = root
        self.stack: list[Tag] = [root]
        self.lists = ListAssembler(self)

    # -- cursor -----------------------------------------------------------

    @property
    def target(self) -> Tag:
        """Current insertion point."""
        return self.stack[-1]

    @property
    def depth(self) -> int:
        return len(self.stack)

    def push(self, node: Tag) -> None:
        self.stack.append(node)

    def pop(self) -> Tag:
        if len(self.stack) == 1:
            raise RuntimeError("cursor stack cannot drop the output root")
        return self.stack.pop()

    # -- traversal --------------------------------------------------------

    def walk(self, source_root: Tag) -> Tag:
        """Rewrite the children of *source_root* into the output root."""
        self.visit_children(source_root)
        if self.lists.active:
            log.warning("List run still open at end of document; closing it")
            self.lists.finish_all()
        return self.root

    def visit_children(self, node: Tag) -> None:
        for child in list(node.children):
            self.visit(child)

    def visit(self, node: PageElement) -> None:
        if isinstance(node, Comment):
            self.visit_comment(node)
        elif isinstance(node, Tag):
            self.visit_element(node)
        elif type(node) is NavigableString:
            self.visit_text(node)

    def visit_text(self, node: NavigableString) -> None:
        content = collapse_text(str(node))
        if content.strip():
            self.target.append(NavigableString(content))

    def visit_element(self, node: Tag) -> None:
        if style_contains(node, LIST_IGNORE_STYLE):
            return
        if not node.contents:
            return
        rule = match_rule(node, self.rules)
        if rule.action == "transparent":
            self.visit_children(node)
        elif rule.action == "list":
            role = list_role(node)
            assert role is not None
            self.lists.handle(role, node)
        else:
            assert rule.build is not None
            self.descend(node, rule.build(self.document, node))

    def visit_comment(self, node: Comment) -> None:
        span = self.decoder.decode(str(node), self.document)
        if span is not None:
            self.target.append(span)

    def descend(self, source: Tag, output: Tag) -> None:
        """Append *output* at the cursor and rewrite *source*'s children
        into it."""
        self.target.append(output)
        depth = self.depth
        self.push(output)
        self.visit_children(source)
        self.lists.finish_inside(depth)
        self.pop()
