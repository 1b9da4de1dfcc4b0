from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading
import time
from typing import Callable, Iterable, List, Optional

from . import config
from .catalog import fetch_catalog
from .detector import detect_changes
from .models import (
    FIELD_ORDER,
    CatalogEntry,
    CatalogError,
    ChangeRecord,
    NewEntry,
    NotificationPayload,
    UpdatedEntry,
)
from .notifier import SlackNotifier
from .render import render
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


class Monitor:
    """One fetch -> detect -> render -> dispatch cycle per tick.

    The snapshot is re-read from the store at the start of every cycle; the
    monitor itself keeps no catalog state between cycles.
    """

    def __init__(
        self,
        store: SnapshotStore,
        notifier: Optional[SlackNotifier],
        *,
        fetch: Callable[[], List[CatalogEntry]] = fetch_catalog,
        shop_url: str = config.SHOP_PAGE_URL,
        tracked_fields: Iterable[str] = config.TRACKED_FIELDS,
        include_removed: bool = config.ENABLE_REMOVED_EVENTS,
        bot_name: str = config.BOT_NAME,
        mention_channel: bool = config.MENTION_CHANNEL,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.fetch = fetch
        self.shop_url = shop_url
        self.tracked_fields = frozenset(tracked_fields)
        self.include_removed = include_removed
        self.bot_name = bot_name
        self.mention_channel = mention_channel
        self._gate = threading.Semaphore(1)  # one cycle at a time

    def run_cycle(self) -> List[ChangeRecord]:
        """Run one poll cycle. Returns the detected change records.

        Fetch and input errors propagate; the snapshot is untouched and
        nothing is sent in that case.
        """
        if not self._gate.acquire(blocking=False):
            logger.warning("Previous poll cycle still running; skipping this tick.")
            return []
        try:
            current = self.fetch()
            previous = self.store.load()
            changes = detect_changes(
                previous,
                current,
                store=self.store,
                tracked_fields=self.tracked_fields,
                include_removed=self.include_removed,
            )
            if changes:
                self._dispatch(changes)
            return changes
        finally:
            self._gate.release()

    def _dispatch(self, changes: List[ChangeRecord]) -> None:
        if self.notifier is None or not self.notifier.channel:
            logger.warning("No Slack channel configured; %d change(s) not posted.", len(changes))
            return
        sent = 0
        for change in changes:
            try:
                payload = render(
                    change,
                    shop_url=self.shop_url,
                    bot_name=self.bot_name,
                    mention_channel=self.mention_channel,
                )
                self.notifier.post(payload)
                sent += 1
            except Exception:
                logger.exception("Failed to notify %s for item %s", change.kind, change.entry.id)
        logger.info("Posted %d/%d updates to Slack.", sent, len(changes))

    def run_forever(self, interval_seconds: float, stop: Optional[threading.Event] = None) -> None:
        """Tick every ``interval_seconds`` until ``stop`` is set.

        A cycle that overruns the interval is followed by the next one
        immediately; missed ticks are dropped, not queued.
        """
        stop = stop or threading.Event()
        logger.info("Polling every %.0f seconds.", interval_seconds)
        while not stop.is_set():
            started = time.monotonic()
            try:
                self.run_cycle()
            except CatalogError:
                logger.exception("Malformed catalog; cycle aborted.")
            except Exception:
                logger.exception("Error fetching shop items.")
            remaining = interval_seconds - (time.monotonic() - started)
            stop.wait(max(0.0, remaining))


def _preview_update(entry: CatalogEntry) -> UpdatedEntry:
    # Every field marked as changed so each update line is rendered.
    values = {f: entry.field_value(f) for f in FIELD_ORDER}
    return UpdatedEntry(
        entry=entry,
        changed_fields=frozenset(FIELD_ORDER),
        previous=values,
        current=dict(values),
    )


def preview(
    fetch: Callable[[], List[CatalogEntry]] = fetch_catalog,
    limit: int = 2,
    *,
    shop_url: str = config.SHOP_PAGE_URL,
    bot_name: str = config.BOT_NAME,
    mention_channel: bool = config.MENTION_CHANNEL,
) -> List[NotificationPayload]:
    """Render new-item and update notifications for the first ``limit``
    live catalog entries and log them. Nothing is posted or saved.
    """
    entries = fetch()
    logger.info("Previewing %d of %d shop items.", min(limit, len(entries)), len(entries))
    payloads: List[NotificationPayload] = []
    for entry in entries[:limit]:
        for change in (NewEntry(entry), _preview_update(entry)):
            payload = render(change, shop_url=shop_url, bot_name=bot_name, mention_channel=mention_channel)
            logger.info(
                "Preview (%s) for %s\nText: %s\nBlocks: %s",
                change.kind,
                entry.name,
                payload.text,
                json.dumps(payload.slack_blocks(), indent=2, ensure_ascii=False),
            )
            payloads.append(payload)
    return payloads


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shop-monitor",
        description="Watch the shop catalog and post changes to Slack.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit.",
    )
    parser.add_argument(
        "--test-message",
        action="store_true",
        dest="test_message",
        help="Post a test message to the channel, then delete it.",
    )
    parser.add_argument(
        "--delete-after",
        type=float,
        default=10.0,
        dest="delete_after",
        help="Seconds before the test message is deleted (default: 10).",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Fetch the catalog and log sample notifications without posting.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=2,
        help="Number of catalog items to preview (default: 2).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the monitor."""
    args = _build_parser().parse_args(argv)
    setup_logging()

    if args.preview:
        try:
            preview(fetch_catalog, args.limit)
        except Exception:
            logger.exception("Error during preview")
            return 1
        return 0

    try:
        config.validate()
    except RuntimeError as e:
        logger.error("%s", e)
        return 1

    notifier = SlackNotifier()
    try:
        if args.test_message:
            try:
                notifier.send_test_message(delete_after=args.delete_after)
            except Exception:
                logger.exception("Error in test message")
                return 1
            return 0

        monitor = Monitor(SnapshotStore(config.CACHE_FILE), notifier)
        if args.once:
            try:
                monitor.run_cycle()
            except Exception:
                logger.exception("Poll cycle failed.")
                return 1
            return 0

        stop = threading.Event()

        def _on_sigterm(signum, frame):
            logger.info("Received SIGTERM, stopping after the current cycle.")
            stop.set()

        signal.signal(signal.SIGTERM, _on_sigterm)

        logger.info("%s is ready! Watching %s", config.BOT_NAME, config.FLAVORTOWN_API_URL)
        try:
            monitor.run_forever(config.FETCH_INTERVAL_SECONDS, stop=stop)
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down.")
        return 0
    finally:
        notifier.close()


if __name__ == "__main__":
    sys.exit(main())
