"""Compare a fresh catalog fetch against the stored snapshot."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import (
    FIELD_ORDER,
    NAME,
    PRICE,
    STOCK,
    CatalogEntry,
    CatalogError,
    ChangeRecord,
    NewEntry,
    RemovedEntry,
    UpdatedEntry,
    valid_id,
)
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)

ALL_FIELDS: frozenset = frozenset(FIELD_ORDER)


def _absent(value: Any) -> Any:
    # None, missing and "" all mean "no value".
    return None if value is None or value == "" else value


def _field_differs(field_name: str, old: CatalogEntry, new: CatalogEntry) -> bool:
    before, after = old.field_value(field_name), new.field_value(field_name)
    if field_name == PRICE:
        return before != after
    return _absent(before) != _absent(after)


def diff_entry(
    old: CatalogEntry,
    new: CatalogEntry,
    tracked_fields: Iterable[str] = ALL_FIELDS,
) -> Optional[UpdatedEntry]:
    """Return an UpdatedEntry for the tracked fields that differ, or None."""
    changed = frozenset(f for f in FIELD_ORDER if f in tracked_fields and _field_differs(f, old, new))
    if not changed:
        return None
    return UpdatedEntry(
        entry=new,
        changed_fields=changed,
        previous={f: old.field_value(f) for f in changed},
        current={f: new.field_value(f) for f in changed},
    )


def _check_entries(current: Any) -> None:
    if not isinstance(current, (list, tuple)):
        raise CatalogError(f"current entries must be a list, got {type(current).__name__}")
    for i, entry in enumerate(current):
        if not isinstance(entry, CatalogEntry):
            raise CatalogError(f"entry #{i} is {type(entry).__name__}, not a CatalogEntry")
        if entry.id is None:
            raise CatalogError(f"entry #{i} ({entry.name!r}) has no id")
        if not valid_id(entry.id):
            raise CatalogError(f"entry #{i} ({entry.name!r}) has a {type(entry.id).__name__} id")


def _log_update(change: UpdatedEntry) -> None:
    name = change.entry.name
    for f in change.ordered_fields():
        if f in (PRICE, STOCK, NAME):
            logger.info("[SYNC] %s changed for %s: %r -> %r", f, name, change.previous[f], change.current[f])
        else:
            logger.info("[SYNC] %s changed for %s", f, name)


def detect_changes(
    previous: Optional[Sequence[CatalogEntry]],
    current: Sequence[CatalogEntry],
    *,
    store: SnapshotStore,
    tracked_fields: Iterable[str] = ALL_FIELDS,
    include_removed: bool = False,
) -> List[ChangeRecord]:
    """Classify ``current`` against ``previous`` and persist the new snapshot.

    A ``previous`` of None is the first run: ``current`` becomes the baseline
    and nothing is reported. Records come back in ``current`` order; removed
    entries (only when ``include_removed``) follow in snapshot order.

    Raises CatalogError for structurally broken input before anything is
    written.
    """
    _check_entries(current)
    tracked = frozenset(tracked_fields)

    if previous is None:
        logger.info("No previous snapshot found, initializing with %d items.", len(current))
        store.save(current)
        return []

    previous_by_id: Dict[Any, CatalogEntry] = {e.id: e for e in previous}
    changes: List[ChangeRecord] = []

    for entry in current:
        old = previous_by_id.get(entry.id)
        if old is None:
            logger.info("[SYNC] New item: %s (id=%s)", entry.name, entry.id)
            changes.append(NewEntry(entry))
            continue
        update = diff_entry(old, entry, tracked)
        if update is not None:
            _log_update(update)
            changes.append(update)

    if include_removed:
        current_ids = {e.id for e in current}
        for old in previous:
            if old.id not in current_ids:
                logger.info("[SYNC] Item removed: %s (id=%s)", old.name, old.id)
                changes.append(RemovedEntry(old))

    if list(previous) != list(current):
        logger.info("Changes detected (total change records: %d). Updating snapshot...", len(changes))
        store.save(current)
    else:
        logger.info("No changes detected since last fetch.")

    return changes


__all__ = ["detect_changes", "diff_entry", "ALL_FIELDS"]
