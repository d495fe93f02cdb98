"""Nested list reconstruction from Word list paragraphs.

Word flattens numbered lists into runs of sibling paragraphs classed
``MsoListParagraphCxSpFirst``, ``...CxSpMiddle`` and ``...CxSpLast`` (a
one-paragraph list is plain ``MsoListParagraph``), with the nesting level
carried in the inline style (``mso-list:l0 level2 lfo1``).

The assembler rebuilds ``<ol>/<li>`` structure on the walker's cursor stack.
It keeps an explicit stack of open containers, one level per container, and
each open container owns exactly one open item on the cursor:

* deeper level   -> open a nested ``<ol>`` inside the current item
* shallower level -> close containers until the innermost open one is at or
  above the new level, then start a sibling item
* same level     -> close the current item, start a sibling item

The run's outermost container is never closed before the run ends; a run
that rises above its starting level keeps using it.  Closing a run pops every
item and container the run opened, returning the cursor to where it was
before the first paragraph.

Runs only ever touch the cursor while it sits on their own open item.  A
list paragraph found deeper than that (in a table cell inside a list item)
starts a nested run, kept on a stack of runs and closed before the element
holding it is popped.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, TypeAlias

from bs4 import Tag

from ibconvert.html_utils import class_list, style_of

if TYPE_CHECKING:
    from ibconvert.walker import TreeWalker

log = logging.getLogger(__name__)

LIST_TAG = "ol"
ITEM_TAG = "li"

_LEVEL_RE = re.compile(r"level(\d+)")


ListRole: TypeAlias = Literal["first", "middle", "last", "single"]


LIST_ROLE_CLASSES: dict[str, ListRole] = {
    "MsoListParagraphCxSpFirst": "first",
    "MsoListParagraphCxSpMiddle": "middle",
    "MsoListParagraphCxSpLast": "last",
    "MsoListParagraph": "single",
}


def list_role(tag: Tag) -> ListRole | None:
    """Return the list role a paragraph's classes assign, if any."""
    for cls in class_list(tag):
        role = LIST_ROLE_CLASSES.get(cls)
        if role is not None:
            return role
    return None


def list_level(style: str) -> int:
    """Read the ``levelN`` token from an inline style; 0 when absent."""
    m = _LEVEL_RE.search(style)
    return int(m.group(1)) if m else 0




@dataclass(slots=True)
class ListContext:
    """State of one contiguous list run."""

    base_depth: int
    levels: list[int] = field(default_factory=list)

    @property
    def level(self) -> int:
        return self.levels[-1]

    @property
    def item_depth(self) -> int:
        """Cursor depth while the run's innermost item is the target."""
        return self.base_depth + 2 * len(self.levels)


class ListAssembler:
    def __init__(self, walker: TreeWalker) -> None:
        self.walker = walker
        self.contexts: list[ListContext] = []
        self.runs = 0

    @property
    def context(self) -> ListContext | None:
        """The innermost open run."""
        return self.contexts[-1] if self.contexts else None

    @property
    def active(self) -> bool:
        return bool(self.contexts)

    def in_item(self) -> bool:
        """True when the cursor sits on the innermost run's open item.

        A list paragraph met anywhere else (inside a table cell within an
        item, say) starts a nested run instead of touching the outer one.
        """
        ctx = self.context
        return ctx is not None and self.walker.depth == ctx.item_depth

    def handle(self, role: ListRole, paragraph: Tag) -> None:
        if role == "first":
            self.open(paragraph)
        elif role == "middle":
            self.continue_run(paragraph)
        elif role == "last":
            self.close(paragraph)
        else:
            self.single(paragraph)

    # -- transitions ------------------------------------------------------

    def open(self, paragraph: Tag) -> None:
        """First paragraph: open a container and its first item."""
        if self.in_item():
            log.warning("List run opened while another was still open; closing it")
            self.finish()
        elif self.context is not None:
            log.debug("list nested inside an open run at depth %d", self.walker.depth)
        level = list_level(style_of(paragraph))
        log.debug("list first: level %d", level)
        self.contexts.append(ListContext(base_depth=self.walker.depth))
        self.runs += 1
        self._open_container(level)
        self.walker.visit_children(paragraph)

    def continue_run(self, paragraph: Tag) -> None:
        """Middle paragraph: reconcile the level, then fill a fresh item."""
        if not self.in_item():
            self.open(paragraph)
            return
        self._reconcile(list_level(style_of(paragraph)))
        self.walker.visit_children(paragraph)

    def close(self, paragraph: Tag) -> None:
        """Last paragraph: reconcile, fill a fresh item, close the run."""
        if not self.in_item():
            self.single(paragraph)
            return
        self._reconcile(list_level(style_of(paragraph)))
        self.walker.visit_children(paragraph)
        self.finish()

    def single(self, paragraph: Tag) -> None:
        """A run of one paragraph: open and close in one step."""
        self.open(paragraph)
        self.finish()

    def finish(self) -> None:
        """Pop every item and container the innermost run holds open."""
        ctx = self.context
        if ctx is None:
            return
        if self.walker.depth != ctx.item_depth:
            raise RuntimeError(
                f"list run closed at cursor depth {self.walker.depth}, "
                f"expected {ctx.item_depth}",
            )
        while ctx.levels:
            self._close_container()
        self.contexts.pop()

    def finish_inside(self, depth: int) -> None:
        """Close runs that were opened below cursor *depth*.

        Called before the walker pops an output element so a run left open
        by a missing closing paragraph cannot outlive its parent element.
        """
        while self.context is not None and self.context.base_depth > depth:
            log.warning("Closing list run left open inside an element")
            self.finish()

    def finish_all(self) -> None:
        while self.contexts:
            self.finish()

    # -- structure --------------------------------------------------------

    def _reconcile(self, level: int) -> None:
        ctx = self.context
        assert ctx is not None
        current = ctx.level
        if level > current:
            log.debug("list deepens: %d -> %d", current, level)
            self._open_container(level)
        elif level < current:
            log.debug("list rises: %d -> %d", current, level)
            while len(ctx.levels) > 1 and ctx.level > level:
                self._close_container()
            if ctx.level < level:
                self._open_container(level)
            else:
                ctx.levels[-1] = level
                self._next_item()
        else:
            log.debug("list same: %d", level)
            self._next_item()

    def _open_container(self, level: int) -> None:
        ctx = self.context
        assert ctx is not None
        document = self.walker.document
        container = document.new_tag(LIST_TAG)
        self.walker.target.append(container)
        self.walker.push(container)
        item = document.new_tag(ITEM_TAG)
        container.append(item)
        self.walker.push(item)
        ctx.levels.append(level)

    def _close_container(self) -> None:
        ctx = self.context
        assert ctx is not None
        self.walker.pop()
        self.walker.pop()
        ctx.levels.pop()

    def _next_item(self) -> None:
        self.walker.pop()
        item = self.walker.document.new_tag(ITEM_TAG)
        self.walker.target.append(item)
        self.walker.push(item)
