"""Word HTML conversion pipeline.

The single entry point for in-memory work is :func:`convert_html`, which
takes the raw exported HTML and returns a :class:`ConversionResult` holding
the output document and run statistics.  :func:`convert_file` adds the file
I/O: it reads the export, writes the rendered document and externalizes
item records under the build directory.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from ibconvert.citation_fields import CitationFieldDecoder
from ibconvert.config import ConvertConfig
from ibconvert.html_utils import read_file
from ibconvert.item_store import ItemDataStore
from ibconvert.jurisdictions import JurisdictionResolver
from ibconvert.walker import TreeWalker

log = logging.getLogger(__name__)

PARSER = "html.parser"


@dataclass(frozen=True, slots=True)
class ConversionStats:
    citations: int
    records_written: int
    records_skipped: int
    list_runs: int
    unresolved_jurisdictions: int


@dataclass(frozen=True, slots=True)
class ConversionResult:
    document: BeautifulSoup
    stats: ConversionStats


def new_output_document(title: str) -> BeautifulSoup:
    """Create the empty output document (``html > head > title``, ``body``)."""
    document = BeautifulSoup("", PARSER)
    html = document.new_tag("html")
    head = document.new_tag("head")
    title_tag = document.new_tag("title")
    title_tag.string = title
    head.append(title_tag)
    html.append(head)
    html.append(document.new_tag("body"))
    document.append(html)
    return document


def source_root(source: BeautifulSoup) -> Tag:
    body = source.body
    return body if body is not None else source


def convert_html(
    raw_html: str,
    config: ConvertConfig,
    *,
    resolver: JurisdictionResolver | None = None,
    store: ItemDataStore | None = None,
) -> ConversionResult:
    """Convert exported Word HTML into a normalized document.

    Args:
        raw_html: The "Save as Web Page" export.
        config: Conversion settings.
        resolver: Jurisdiction resolver; built from ``config`` when omitted
            and the configured top-level jurisdictions are preloaded.
        store: Item record store; when omitted no records are written.

    Raises:
        FieldDecodeError: a citation field payload is malformed.
        JurisdictionSourceError: a jurisdiction definition file is missing.
    """
    if resolver is None:
        resolver = JurisdictionResolver(config.juris_maps_dir)
        resolver.preload(config.preload_jurisdictions)

    source = BeautifulSoup(raw_html, PARSER)
    document = new_output_document(config.title)
    decoder = CitationFieldDecoder(resolver.lookup, store)
    walker = TreeWalker(document, decoder)
    walker.walk(source_root(source))

    stats = ConversionStats(
        citations=decoder.citations,
        records_written=store.written if store is not None else 0,
        records_skipped=store.skipped if store is not None else 0,
        list_runs=walker.lists.runs,
        unresolved_jurisdictions=decoder.unresolved_jurisdictions,
    )
    log.info(
        "Converted document: %d citations, %d list runs, "
        "%d records written, %d already present",
        stats.citations, stats.list_runs,
        stats.records_written, stats.records_skipped,
    )
    if stats.unresolved_jurisdictions:
        log.warning(
            "%d citation items had unresolved jurisdiction codes "
            "(definitions loaded: %s; missing: %s)",
            stats.unresolved_jurisdictions,
            ", ".join(resolver.loaded) or "none",
            ", ".join(resolver.missing) or "none",
        )
    return ConversionResult(document=document, stats=stats)


def render_document(document: BeautifulSoup, *, pretty: bool = True) -> str:
    if pretty:
        return document.prettify()
    return str(document)


def write_output(result: ConversionResult, config: ConvertConfig) -> Path:
    path = config.output_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_document(result.document, pretty=config.pretty), encoding="utf-8")
    log.info("Wrote %s", path)
    return path


def convert_file(input_path: Path, config: ConvertConfig) -> ConversionResult:
    """Read *input_path*, convert it and write all build artifacts."""
    raw_html = read_file(input_path)
    store = ItemDataStore(config.itemdata_dir, pretty=config.pretty)
    result = convert_html(raw_html, config, store=store)
    write_output(result, config)
    return result
