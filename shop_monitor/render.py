"""Build Slack notification payloads from change records."""

from __future__ import annotations

from typing import List

from .markup import markdown_to_slack, truncate
from .models import (
    DESCRIPTION,
    IMAGE,
    LONG_DESCRIPTION,
    NAME,
    PRICE,
    STOCK,
    Block,
    ChangeRecord,
    ImageBlock,
    NewEntry,
    NotificationPayload,
    RemovedEntry,
    TextBlock,
    UpdatedEntry,
)
from .prices import format_prices

TEXT_LIMIT = 500
NAME_LIMIT = 120
NO_DESCRIPTION = "_No description provided, it's a mystery!_"
UNLIMITED = "Unlimited"


def buy_link(shop_url: str, entry_id) -> str:
    return f"{shop_url.rstrip('/')}/order?shop_item_id={entry_id}"


def _stock(value) -> str:
    return UNLIMITED if value is None or value == "" else str(value)


def _mention(mention_channel: bool) -> str:
    return "<!channel> " if mention_channel else ""


def _cta(shop_url: str, entry_id) -> TextBlock:
    return TextBlock(f"*<{buy_link(shop_url, entry_id)}|Buy now!>*")


def _before_after(label: str, before, after) -> str:
    before = markdown_to_slack(truncate(before, TEXT_LIMIT))
    after = markdown_to_slack(truncate(after, TEXT_LIMIT))
    return f"*{label} changed:*\n*Before:*\n{before}\n*Now:*\n{after}\n"


def _update_lines(change: UpdatedEntry) -> str:
    prev, cur = change.previous, change.current
    lines: List[str] = []
    for f in change.ordered_fields():
        if f == PRICE:
            lines.append(
                f"*Prices changed:*\n*Before:*\n{format_prices(prev[f])}\n*Now:*\n{format_prices(cur[f])}\n"
            )
        elif f == STOCK:
            lines.append(f"*Stock changed:* {_stock(prev[f])} -> {_stock(cur[f])} left!\n")
        elif f == DESCRIPTION:
            lines.append(_before_after("Description", prev[f], cur[f]))
        elif f == LONG_DESCRIPTION:
            lines.append(_before_after("Long description", prev[f], cur[f]))
        elif f == NAME:
            lines.append(
                f"*Name changed:* {truncate(prev[f], NAME_LIMIT)} -> {truncate(cur[f], NAME_LIMIT)}\n"
            )
        elif f == IMAGE:
            lines.append("*Image updated.*\n")
    return "".join(lines)


def _render_new(change: NewEntry, shop_url: str, bot_name: str, mention_channel: bool) -> NotificationPayload:
    entry = change.entry
    description = NO_DESCRIPTION
    if entry.description:
        description = markdown_to_slack(truncate(entry.description, TEXT_LIMIT))
    blocks: List[Block] = [
        TextBlock(
            f"{_mention(mention_channel)}*Ooooh lookie here!* {bot_name} just spotted something new "
            f"on the menu! :ultrafastparrot: :flavortown: :yay: \n\n*{entry.name}* \n> {description}"
        ),
        TextBlock(f"*Prices:*\n{format_prices(entry.ticket_cost)}"),
        TextBlock(f"*Stock:* {_stock(entry.stock)} left!"),
    ]
    if entry.image_url:
        blocks.append(ImageBlock(url=entry.image_url, alt_text=entry.name))
    blocks.append(_cta(shop_url, entry.id))
    return NotificationPayload(text=f"{bot_name} found a new item: {entry.name}!", blocks=blocks)


def _render_update(change: UpdatedEntry, shop_url: str, bot_name: str, mention_channel: bool) -> NotificationPayload:
    entry = change.entry
    blocks: List[Block] = [
        TextBlock(
            f"{_mention(mention_channel)}*Heads up!* {bot_name} noticed some changes for "
            f"*{entry.name}*! :huh: \n\n{_update_lines(change)}"
        ),
        TextBlock(f"*Current Prices:*\n{format_prices(entry.ticket_cost)}\n"),
    ]
    if IMAGE in change.changed_fields and entry.image_url:
        blocks.append(ImageBlock(url=entry.image_url, alt_text=entry.name))
    blocks.append(_cta(shop_url, entry.id))
    return NotificationPayload(text=f"{bot_name} noticed a change for {entry.name}!", blocks=blocks)


def _render_removed(change: RemovedEntry, bot_name: str, mention_channel: bool) -> NotificationPayload:
    entry = change.entry
    blocks: List[Block] = [
        TextBlock(
            f"{_mention(mention_channel)}*Gone!* {bot_name} can't find *{entry.name}* on the menu anymore. :sob:"
        ),
        TextBlock(f"*Last known prices:*\n{format_prices(entry.ticket_cost)}"),
    ]
    return NotificationPayload(text=f"{bot_name} noticed {entry.name} left the shop.", blocks=blocks)


def render(
    change: ChangeRecord,
    *,
    shop_url: str,
    bot_name: str = "Heidi",
    mention_channel: bool = True,
) -> NotificationPayload:
    """Turn one change record into a Slack message payload."""
    if isinstance(change, NewEntry):
        return _render_new(change, shop_url, bot_name, mention_channel)
    if isinstance(change, UpdatedEntry):
        return _render_update(change, shop_url, bot_name, mention_channel)
    if isinstance(change, RemovedEntry):
        return _render_removed(change, bot_name, mention_channel)
    raise TypeError(f"Unsupported change record: {type(change).__name__}")


__all__ = ["render", "buy_link", "TEXT_LIMIT", "NAME_LIMIT", "NO_DESCRIPTION", "UNLIMITED"]
