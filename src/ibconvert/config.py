"""Conversion settings.

Paths default to the layout the converter has always used: jurisdiction
definitions in a sibling ``JM`` checkout and build artifacts under
``./build``.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_JURIS_MAPS_DIR = Path("..") / "JM" / "jurism" / "juris-maps"
DEFAULT_BUILD_DIR = Path("build")
DEFAULT_TITLE = "Indigo Book"


@dataclass(frozen=True, slots=True)
class ConvertConfig:
    juris_maps_dir: Path = DEFAULT_JURIS_MAPS_DIR
    build_dir: Path = DEFAULT_BUILD_DIR
    output_name: str = "sample-output.html"
    itemdata_subdir: str = "static/itemdata"
    title: str = DEFAULT_TITLE
    preload_jurisdictions: tuple[str, ...] = ("us",)
    pretty: bool = True

    @property
    def output_path(self) -> Path:
        return self.build_dir / self.output_name

    @property
    def itemdata_dir(self) -> Path:
        return self.build_dir / self.itemdata_subdir
