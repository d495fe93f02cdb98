"""Hierarchical jurisdiction code expansion.

Jurisdiction definitions ship one file per top-level code,
``juris-<code>-map.json``, shaped as::

    {"jurisdictions": {"default": [[code, name, parent_index], ...]}}

Row 0 is the root and has no parent.  Every later row names its parent by
index into the same list, and the list is topologically ordered, so a single
forward pass accumulates the full colon-joined code and pipe-joined display
name of each row.  The exposed map is keyed by the accumulated code and
valued by the composite ``offset + code + name`` string, where ``offset`` is
the zero-padded length of the code::

    us:ca  ->  "005us:caUnited States|California"
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

import orjson

from ibconvert.errors import JurisdictionSourceError
from ibconvert.io_utils import load_json

log = logging.getLogger(__name__)

CODE_SEPARATOR = ":"
NAME_SEPARATOR = "|"
OFFSET_WIDTH = 3

JurisdictionRow: TypeAlias = Sequence[Any]
JurisdictionMap: TypeAlias = dict[str, str]


@dataclass(frozen=True, slots=True)
class JurisdictionEntry:
    """One accumulated jurisdiction row."""

    offset: str
    code: str
    name: str

    @property
    def composite(self) -> str:
        return f"{self.offset}{self.code}{self.name}"


def pad_offset(length: int) -> str:
    """Zero-pad a code length to three digits."""
    if length < 0 or length >= 10 ** OFFSET_WIDTH:
        raise ValueError(f"jurisdiction code length out of range: {length}")
    return str(length).zfill(OFFSET_WIDTH)


def accumulate_entries(rows: Sequence[JurisdictionRow]) -> list[JurisdictionEntry]:
    """Accumulate full codes and names along each row's parent chain.

    Parent indexes must point at earlier rows; forward references are not
    detected and raise ``IndexError``.
    """
    entries: list[JurisdictionEntry] = []
    for i, row in enumerate(rows):
        own_code = str(row[0])
        display_name = str(row[1])
        if i == 0:
            code = own_code
            name = display_name
        else:
            parent = entries[int(row[2])]
            code = f"{parent.code}{CODE_SEPARATOR}{own_code}"
            name = f"{parent.name}{NAME_SEPARATOR}{display_name}"
        entries.append(JurisdictionEntry(
            offset=pad_offset(len(code)),
            code=code,
            name=name,
        ))
    return entries


def build_jurisdiction_map(rows: Sequence[JurisdictionRow]) -> JurisdictionMap:
    """Build the ``code -> composite`` lookup for one definition list."""
    return {entry.code: entry.composite for entry in accumulate_entries(rows)}


def top_level_code(code: str) -> str:
    return code.split(CODE_SEPARATOR, 1)[0]


def definition_filename(top_level: str) -> str:
    return f"juris-{top_level}-map.json"


class JurisdictionResolver:
    """Loads jurisdiction definitions on demand and caches one map per
    top-level code for the lifetime of the resolver."""

    def __init__(self, maps_dir: Path) -> None:
        self.maps_dir = maps_dir
        self._maps: dict[str, JurisdictionMap] = {}
        self._missing: set[str] = set()

    def definition_path(self, top_level: str) -> Path:
        return self.maps_dir / definition_filename(top_level)

    def load(self, code: str) -> JurisdictionMap:
        """Return the map for the top-level jurisdiction owning *code*.

        Raises:
            JurisdictionSourceError: the definition file is missing,
                unreadable, or not shaped as expected.
        """
        top = top_level_code(code)
        cached = self._maps.get(top)
        if cached is not None:
            return cached

        path = self.definition_path(top)
        try:
            raw = load_json(path)
        except OSError as exc:
            raise JurisdictionSourceError(
                f"cannot read jurisdiction definitions for {top!r}: {path}",
            ) from exc
        except orjson.JSONDecodeError as exc:
            raise JurisdictionSourceError(
                f"malformed jurisdiction definitions in {path}: {exc}",
            ) from exc

        try:
            rows = raw["jurisdictions"]["default"]
            mapping = build_jurisdiction_map(rows)
        except (KeyError, TypeError, IndexError) as exc:
            raise JurisdictionSourceError(
                f"unexpected jurisdiction definition layout in {path}",
            ) from exc

        log.info("Loaded %d jurisdiction codes for %s", len(mapping), top)
        self._maps[top] = mapping
        return mapping

    def preload(self, codes: Iterable[str]) -> None:
        for code in codes:
            self.load(code)

    def lookup(self, code: str) -> str | None:
        """Return the composite string for *code*, or None when unknown.

        A top-level code with no definition file resolves nothing; the miss
        is remembered so the file is checked once.  Sources that exist but
        cannot be read still raise.
        """
        top = top_level_code(code)
        if top in self._missing:
            return None
        if top not in self._maps and not self.definition_path(top).exists():
            log.warning(
                "No jurisdiction definitions for %r (%s); codes under it stay unresolved",
                top, self.definition_path(top),
            )
            self._missing.add(top)
            return None
        return self.load(code).get(code)

    @property
    def loaded(self) -> tuple[str, ...]:
        return tuple(self._maps)

    @property
    def missing(self) -> tuple[str, ...]:
        return tuple(sorted(self._missing))
