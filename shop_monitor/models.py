"""Data types shared by the detector, renderer and notifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Union

# Change-record field names, in the order update notifications list them.
PRICE = "price"
STOCK = "stock"
DESCRIPTION = "description"
LONG_DESCRIPTION = "long_description"
NAME = "name"
IMAGE = "image"

FIELD_ORDER: tuple[str, ...] = (PRICE, STOCK, DESCRIPTION, LONG_DESCRIPTION, NAME, IMAGE)

# Field name -> CatalogEntry attribute.
_FIELD_ATTRS = {
    PRICE: "ticket_cost",
    STOCK: "stock",
    DESCRIPTION: "description",
    LONG_DESCRIPTION: "long_description",
    NAME: "name",
    IMAGE: "image_url",
}

# Keys of the shop feed that map onto CatalogEntry attributes.
_WIRE_KEYS = ("id", "name", "description", "long_description", "ticket_cost", "stock", "image_url")


class CatalogError(ValueError):
    """Raised when catalog input is structurally unusable (not a list, entries without id)."""


def valid_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


@dataclass
class CatalogEntry:
    id: Union[str, int]
    name: str = ""
    description: Optional[str] = None
    long_description: Optional[str] = None
    ticket_cost: Optional[Dict[str, float]] = None   # region code -> cost, incl. "base_cost"
    stock: Optional[int] = None                      # None means unlimited
    image_url: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # untracked feed keys, kept verbatim

    @classmethod
    def from_dict(cls, raw: Any) -> "CatalogEntry":
        if not isinstance(raw, Mapping):
            raise CatalogError(f"catalog entry must be an object, got {type(raw).__name__}")
        if raw.get("id") is None:
            raise CatalogError(f"catalog entry without id: {raw.get('name')!r}")
        if not valid_id(raw["id"]):
            raise CatalogError(f"catalog entry id must be a string or integer, got {type(raw['id']).__name__}")
        cost = raw.get("ticket_cost")
        return cls(
            id=raw["id"],
            name=raw.get("name") or "",
            description=raw.get("description"),
            long_description=raw.get("long_description"),
            ticket_cost=dict(cost) if isinstance(cost, Mapping) else cost,
            stock=raw.get("stock"),
            image_url=raw.get("image_url"),
            extra={k: v for k, v in raw.items() if k not in _WIRE_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "long_description": self.long_description,
            "ticket_cost": self.ticket_cost,
            "stock": self.stock,
            "image_url": self.image_url,
        }
        data.update(self.extra)
        return data

    def field_value(self, field_name: str) -> Any:
        return getattr(self, _FIELD_ATTRS[field_name])


# ---- Change records ----------------------------------------------------------

@dataclass
class NewEntry:
    entry: CatalogEntry
    kind: ClassVar[str] = "new"


@dataclass
class UpdatedEntry:
    entry: CatalogEntry
    changed_fields: frozenset
    previous: Dict[str, Any] = field(default_factory=dict)
    current: Dict[str, Any] = field(default_factory=dict)
    kind: ClassVar[str] = "update"

    def ordered_fields(self) -> List[str]:
        return [f for f in FIELD_ORDER if f in self.changed_fields]


@dataclass
class RemovedEntry:
    entry: CatalogEntry   # last known state
    kind: ClassVar[str] = "removed"


ChangeRecord = Union[NewEntry, UpdatedEntry, RemovedEntry]


# ---- Notification payload ----------------------------------------------------

@dataclass
class TextBlock:
    markup: str

    def to_slack(self) -> dict:
        return {"type": "section", "text": {"type": "mrkdwn", "text": self.markup}}


@dataclass
class ImageBlock:
    url: str
    alt_text: str

    def to_slack(self) -> dict:
        # Slack rejects image blocks with an empty alt_text.
        return {"type": "image", "image_url": self.url, "alt_text": self.alt_text or "image"}


Block = Union[TextBlock, ImageBlock]


@dataclass
class NotificationPayload:
    text: str
    blocks: List[Block] = field(default_factory=list)

    def slack_blocks(self) -> List[dict]:
        return [b.to_slack() for b in self.blocks]


__all__ = [
    "PRICE", "STOCK", "DESCRIPTION", "LONG_DESCRIPTION", "NAME", "IMAGE", "FIELD_ORDER",
    "CatalogError",
    "valid_id",
    "CatalogEntry",
    "NewEntry",
    "UpdatedEntry",
    "RemovedEntry",
    "ChangeRecord",
    "TextBlock",
    "ImageBlock",
    "Block",
    "NotificationPayload",
]
