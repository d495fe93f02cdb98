"""Text cleanup, attribute helpers and encoding-safe file reading.

Word's "Save as Web Page" export carries most of its semantics in ``class``
and inline ``style`` attributes (``mso-list:l0 level2 lfo1``,
``mso-element:field-begin``, ``font-variant:small-caps``).  The helpers here
give the walker a uniform view of those attributes regardless of whether
the parser stored them as strings or lists.
"""
from __future__ import annotations

import re
from pathlib import Path

from bs4 import Tag

# ---------------------------------------------------------------------------
# Text normalization
# ---------------------------------------------------------------------------

NBSP_MARKER = "&nbsp;"

_WHITESPACE_RE = re.compile(r"\s+")

# U+200B (ZWSP), U+200C (ZWNJ), U+FEFF (BOM): invisible characters left
# behind by Word conversions.
_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\ufeff]")


def strip_zero_width(text: str) -> str:
    """Remove zero-width Unicode characters."""
    return _ZERO_WIDTH_RE.sub("", text)


def collapse_text(text: str) -> str:
    """Normalize a text node for output.

    Literal ``&nbsp;`` markers and U+00A0 become ordinary spaces and every
    whitespace run collapses to a single space.  The result is not trimmed;
    callers decide whether a whitespace-only result is worth keeping.
    """
    text = text.replace(NBSP_MARKER, " ").replace("\u00a0", " ")
    text = strip_zero_width(text)
    return _WHITESPACE_RE.sub(" ", text)


# ---------------------------------------------------------------------------
# Attribute helpers
# ---------------------------------------------------------------------------


def class_list(tag: Tag) -> list[str]:
    """Return the element's classes as a list (empty when absent)."""
    value = tag.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def has_class(tag: Tag, name: str) -> bool:
    return name in class_list(tag)


def style_of(tag: Tag) -> str:
    """Return the inline ``style`` attribute, or an empty string."""
    value = tag.get("style")
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return " ".join(str(v) for v in value)


def style_contains(tag: Tag, token: str) -> bool:
    return token in style_of(tag)


# ---------------------------------------------------------------------------
# Encoding-safe file reading
# ---------------------------------------------------------------------------


READ_ENCODINGS: tuple[str, ...] = ("utf-8", "cp1252")


def read_file(fpath: Path) -> str:
    """Read a Word export, trying UTF-8 then CP1252.

    Exports saved with the Windows code page carry smart quotes (0x93/0x94)
    and section signs (0xA7) that are not valid UTF-8.  Bytes neither
    encoding accepts are decoded as UTF-8 with replacement characters.

    Raises:
        OSError: the file cannot be read.
    """
    data = fpath.read_bytes()
    for encoding in READ_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")
