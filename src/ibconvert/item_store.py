"""Write-once store for cited item records.

Each cited item's bibliographic data is externalized as ``<id>.json`` under
the store root.  A record that already exists is never rewritten, so the
first occurrence of an item in a run (or in an earlier run against the same
build directory) wins.  The existence check and the write are not atomic;
one converter process per build directory is assumed.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ibconvert.io_utils import save_json

log = logging.getLogger(__name__)


class ItemDataStore:
    def __init__(self, root: Path, *, pretty: bool = True) -> None:
        self.root = root
        self.pretty = pretty
        self.written = 0
        self.skipped = 0

    def path_for(self, item_id: str) -> Path:
        return self.root / f"{item_id}.json"

    def exists(self, item_id: str) -> bool:
        return self.path_for(item_id).exists()

    def write_once(self, item_data: dict[str, Any]) -> bool:
        """Persist *item_data* keyed by its ``id`` unless a record exists.

        Returns True when the record was written, False when skipped.
        """
        item_id = str(item_data["id"])
        if self.exists(item_id):
            self.skipped += 1
            log.debug("Item record %s already present, skipping", item_id)
            return False
        save_json(item_data, self.path_for(item_id), pretty=self.pretty)
        self.written += 1
        return True
