"""Configuration loader.

Reads environment variables and `.env` to configure the service.
"""

from __future__ import annotations

import os
import re
from typing import Optional, List
from pathlib import Path

from dotenv import load_dotenv

from .models import FIELD_ORDER

# Load variables from a .env file if present (project root).
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _get_list(name: str, default: str = "") -> list[str]:
    raw = _get_env(name, default) or ""
    return [s.strip().lower() for s in raw.split(",") if s.strip()]


def get_channel_id(value: Optional[str]) -> Optional[str]:
    """Accept either a raw channel id or a Slack ``.../archives/<ID>`` URL."""
    if not value:
        return None
    match = re.search(r"archives/([A-Z0-9]+)", value, re.IGNORECASE)
    return match.group(1) if match else value


# ---- Slack -------------------------------------------------------------------

SLACK_BOT_TOKEN: Optional[str] = _get_env("SLACK_BOT_TOKEN")

# Channel link copied from the Slack client, or a bare channel id.
SLACK_CHANNEL_URL: Optional[str] = _get_env("SLACK_CHANNEL_URL")
SLACK_CHANNEL_ID: Optional[str] = get_channel_id(SLACK_CHANNEL_URL)

SLACK_API_URL: str = _get_env("SLACK_API_URL", "https://slack.com/api")

# ---- Shop catalog ------------------------------------------------------------

# Base URL for the shop API. Trailing slash is tolerated.
FLAVORTOWN_API_URL: str = _get_env("FLAVORTOWN_API_URL", "https://flavortown.hackclub.com")
FLAVORTOWN_API_KEY: Optional[str] = _get_env("FLAVORTOWN_API_KEY")

# Purchase links are built as <SHOP_PAGE_URL>/order?shop_item_id=<id>.
SHOP_PAGE_URL: str = _get_env("SHOP_PAGE_URL", "https://flavortown.hackclub.com/shop")

FETCH_INTERVAL_MS: int = _parse_int(_get_env("FETCH_INTERVAL_MS", "300000"), 300000)
FETCH_INTERVAL_SECONDS: float = FETCH_INTERVAL_MS / 1000.0

REQUEST_TIMEOUT_SECONDS: int = _parse_int(_get_env("REQUEST_TIMEOUT_SECONDS", "20"), 20)

# Last-known catalog snapshot.
CACHE_FILE: str = _get_env("CACHE_FILE", str(Path(__file__).resolve().parents[1] / "cache.json"))

# Logging level: DEBUG, INFO, WARNING, ERROR.
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO")

# ---- Change detection & rendering -------------------------------------------

KNOWN_FIELDS: tuple[str, ...] = FIELD_ORDER


def _get_tracked_fields() -> List[str]:
    # Unset or blank means every known field.
    return _get_list("TRACKED_FIELDS") or list(KNOWN_FIELDS)


# Fields whose change produces an update notification.
TRACKED_FIELDS: List[str] = _get_tracked_fields()

# Emit removed events for items that disappear from the shop.
ENABLE_REMOVED_EVENTS: bool = _parse_bool(_get_env("ENABLE_REMOVED_EVENTS", "false"), False)

# Prefix notifications with <!channel>.
MENTION_CHANNEL: bool = _parse_bool(_get_env("MENTION_CHANNEL", "true"), True)

BOT_NAME: str = _get_env("BOT_NAME", "Heidi")

# ---- Validation --------------------------------------------------------------

def validate() -> None:
    """Validate required configuration parameters."""
    if not SLACK_BOT_TOKEN:
        raise RuntimeError(
            "SLACK_BOT_TOKEN must be set. See .env.example for details."
        )
    if not SLACK_CHANNEL_ID:
        raise RuntimeError(
            "SLACK_CHANNEL_URL must be set to a channel link or id."
        )
    unknown = [f for f in TRACKED_FIELDS if f not in KNOWN_FIELDS]
    if unknown:
        raise RuntimeError(
            f"Unknown TRACKED_FIELDS: {', '.join(unknown)} (known: {', '.join(KNOWN_FIELDS)})"
        )


__all__ = [
    # Slack
    "SLACK_BOT_TOKEN",
    "SLACK_CHANNEL_URL",
    "SLACK_CHANNEL_ID",
    "SLACK_API_URL",
    # Shop
    "FLAVORTOWN_API_URL",
    "FLAVORTOWN_API_KEY",
    "SHOP_PAGE_URL",
    "FETCH_INTERVAL_MS",
    "FETCH_INTERVAL_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
    "CACHE_FILE",
    "LOG_LEVEL",
    # Detection & rendering
    "KNOWN_FIELDS",
    "TRACKED_FIELDS",
    "ENABLE_REMOVED_EVENTS",
    "MENTION_CHANNEL",
    "BOT_NAME",
    # Helpers
    "get_channel_id",
    "validate",
]
