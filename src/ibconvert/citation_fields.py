"""Citation field decoding.

Word stores reference-manager citations as field codes wrapped in
conditional comments::

    <!--[if supportFields]><span style='mso-element:field-begin'>
     ADDIN ZOTERO_ITEM CSL_CITATION {"citationItems": [...]}</span><![endif]-->

The payload after the fixed-length instruction prefix is CSL citation JSON.
Decoding a field:

1. parses the payload into a :class:`CitationField`;
2. expands each item's jurisdiction code and injects the item id
   (:func:`fix_field`);
3. derives the compact descriptor (:func:`build_descriptor`), one
   ``signal-id-position-suppress[-locator]`` segment per item joined by
   ``++``;
4. externalizes each item's data through the item store;
5. yields an empty ``<span class="cite" data-info="...">`` marker for the
   output tree.

Citation position (first / subsequent / id.) is not recorded in the
document, so the position code is always ``0``.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

import orjson
from bs4 import BeautifulSoup, Tag

from ibconvert.errors import FieldDecodeError
from ibconvert.io_utils import loads_json
from ibconvert.item_store import ItemDataStore
from ibconvert.signals import signal_code_for

log = logging.getLogger(__name__)

FIELD_OPEN = "[if supportFields]>"
FIELD_CLOSE = "<![endif]"
FIELD_BEGIN_STYLE = "mso-element:field-begin"
# len(" ADDIN ZOTERO_ITEM CSL_CITATION ")
FIELD_INSTRUCTION_LENGTH = 32

SEGMENT_SEPARATOR = "++"
PART_SEPARATOR = "-"
POSITION_CODE = "0"

CITE_CLASS = "cite"
INFO_ATTR = "data-info"

JurisdictionLookup: TypeAlias = Callable[[str], str | None]


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CitationItem:
    """One cited item inside a citation field."""

    prefix: str
    suppress_author: bool
    locator: str | None
    uri: tuple[str, ...]
    item_data: dict[str, Any]

    @property
    def item_id(self) -> str:
        """Final path segment of the first URI."""
        return self.uri[0].rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class CitationField:
    """A decoded citation field: an ordered run of cited items."""

    items: tuple[CitationItem, ...]
    citation_id: str | None = None


# ---------------------------------------------------------------------------
# Comment unwrapping
# ---------------------------------------------------------------------------


def is_field_comment(content: str) -> bool:
    return content.startswith(FIELD_OPEN) and content.endswith(FIELD_CLOSE)


def _is_field_begin(style: str | None) -> bool:
    return bool(style) and FIELD_BEGIN_STYLE in str(style)


def extract_field_payload(content: str) -> str | None:
    """Return the cleaned field payload of a conditional field comment.

    Returns None when *content* is not a field wrapper or the wrapped
    fragment has no field-begin span.  The payload is read from the
    top-level fragment node that holds the field-begin span, so both a bare
    begin span and one nested in a wrapper span are handled.
    """
    if not is_field_comment(content):
        return None
    inner = content[len(FIELD_OPEN):-len(FIELD_CLOSE)]
    fragment = BeautifulSoup(inner, "html.parser")
    begin = fragment.find("span", attrs={"style": _is_field_begin})
    if not isinstance(begin, Tag):
        return None

    holder = begin
    while holder.parent is not None and holder.parent is not fragment:
        holder = holder.parent

    text = holder.get_text()[FIELD_INSTRUCTION_LENGTH:]
    text = text.replace("&quot;", '"')
    text = text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return text.strip()


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def _parse_item(raw_item: Any) -> CitationItem:
    if not isinstance(raw_item, dict):
        raise FieldDecodeError(f"citation item is not an object: {raw_item!r}")
    uri = raw_item.get("uri") or raw_item.get("uris") or []
    if isinstance(uri, str):
        uri = [uri]
    if not uri:
        raise FieldDecodeError("citation item has no uri")
    locator = raw_item.get("locator")
    item_data = raw_item.get("itemData") or {}
    if not isinstance(item_data, dict):
        raise FieldDecodeError("citation itemData is not an object")
    return CitationItem(
        prefix=str(raw_item.get("prefix") or ""),
        suppress_author=bool(raw_item.get("suppress-author")),
        locator=str(locator) if locator not in (None, "") else None,
        uri=tuple(str(u) for u in uri),
        item_data=dict(item_data),
    )


def parse_citation_field(payload: str) -> CitationField:
    """Decode CSL citation JSON into a :class:`CitationField`.

    Raises:
        FieldDecodeError: the payload is not valid JSON or lacks
            ``citationItems`` / item URIs.
    """
    try:
        raw = loads_json(payload)
    except orjson.JSONDecodeError as exc:
        raise FieldDecodeError(
            f"malformed citation field payload: {payload[:80]!r}",
        ) from exc
    if not isinstance(raw, dict) or not isinstance(raw.get("citationItems"), list):
        raise FieldDecodeError(
            f"citation field payload has no citationItems: {payload[:80]!r}",
        )
    citation_id = raw.get("citationID")
    return CitationField(
        items=tuple(_parse_item(item) for item in raw["citationItems"]),
        citation_id=str(citation_id) if citation_id is not None else None,
    )


# ---------------------------------------------------------------------------
# Field fix-up and descriptor
# ---------------------------------------------------------------------------


def fix_item(item: CitationItem, lookup: JurisdictionLookup) -> CitationItem:
    """Expand the jurisdiction code and inject ``id`` into the item data.

    An unknown jurisdiction code becomes None; it is not an error.
    """
    data = dict(item.item_data)
    code = data.get("jurisdiction")
    if code:
        data["jurisdiction"] = lookup(str(code))
    data["id"] = item.item_id
    return replace(item, item_data=data)


def fix_field(field: CitationField, lookup: JurisdictionLookup) -> CitationField:
    return replace(field, items=tuple(fix_item(item, lookup) for item in field.items))


def item_segment(item: CitationItem) -> str:
    parts = [
        signal_code_for(item.prefix),
        item.item_id,
        POSITION_CODE,
        "1" if item.suppress_author else "0",
    ]
    if item.locator:
        parts.append(item.locator)
    return PART_SEPARATOR.join(parts)


def build_descriptor(field: CitationField) -> str:
    return SEGMENT_SEPARATOR.join(item_segment(item) for item in field.items)


def make_cite_span(document: BeautifulSoup, descriptor: str) -> Tag:
    return document.new_tag("span", attrs={"class": CITE_CLASS, INFO_ATTR: descriptor})


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------


class CitationFieldDecoder:
    """Turns field comments into citation marker spans.

    Item records are written through *store* when one is given.
    """

    def __init__(
        self,
        lookup: JurisdictionLookup,
        store: ItemDataStore | None = None,
    ) -> None:
        self.lookup = lookup
        self.store = store
        self.citations = 0
        self.unresolved_jurisdictions = 0

    def decode_field(self, content: str) -> CitationField | None:
        """Parse and fix the field in *content*; None for non-field comments."""
        payload = extract_field_payload(content)
        if payload is None:
            return None
        parsed = parse_citation_field(payload)
        fixed = fix_field(parsed, self.lookup)
        for before, after in zip(parsed.items, fixed.items):
            code = before.item_data.get("jurisdiction")
            if code and after.item_data.get("jurisdiction") is None:
                self.unresolved_jurisdictions += 1
                log.warning(
                    "Unresolved jurisdiction %r for item %s in citation %s",
                    code, after.item_id, fixed.citation_id or "(no id)",
                )
        return fixed

    def decode(self, content: str, document: BeautifulSoup) -> Tag | None:
        field = self.decode_field(content)
        if field is None:
            return None
        descriptor = build_descriptor(field)
        log.debug("Citation %s -> %s", field.citation_id or "(no id)", descriptor)
        if self.store is not None:
            for item in field.items:
                self.store.write_once(item.item_data)
        self.citations += 1
        return make_cite_span(document, descriptor)
