"""JSON file persistence for the last-known catalog snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from .models import CatalogEntry, CatalogError

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Holds the catalog as of the last processed poll cycle.

    The file is always rewritten in full. Writes go to a temp file in the
    same directory that is then moved over the target, so a crash never
    leaves a half-written snapshot behind.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)

    def load(self) -> Optional[List[CatalogEntry]]:
        """Return the stored entries, or None if there is no usable snapshot."""
        if not self.path.exists():
            logger.info("No snapshot at %s", self.path)
            return None
        try:
            data = self.path.read_text(encoding="utf-8").strip()
            if not data:
                logger.info("Snapshot %s is empty", self.path)
                return None
            raw = json.loads(data)
            if not isinstance(raw, list):
                raise CatalogError(f"expected a JSON array, got {type(raw).__name__}")
            return [CatalogEntry.from_dict(item) for item in raw]
        except (OSError, ValueError):
            # ValueError covers JSONDecodeError and CatalogError
            logger.warning("Ignoring unreadable snapshot %s", self.path, exc_info=True)
            return None

    def save(self, entries: Sequence[CatalogEntry]) -> bool:
        """Overwrite the snapshot with ``entries``. Returns False if the write failed."""
        logger.info("Saving %d items to snapshot %s", len(entries), self.path)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)
            fd, tmp_name = tempfile.mkstemp(prefix=".snapshot-", suffix=".json", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save snapshot %s", self.path)
            return False
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.info("Snapshot saved successfully.")
        return True


__all__ = ["SnapshotStore"]
