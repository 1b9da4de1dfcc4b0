"""Tests for the JSON snapshot store."""

import json

from shop_monitor.models import CatalogEntry
from shop_monitor.snapshot import SnapshotStore


def _entries():
    return [
        CatalogEntry(
            id=1,
            name="Sticker pack",
            description="**Shiny** stickers",
            ticket_cost={"base_cost": 3, "us": 3, "eu": 4},
            stock=None,
            image_url="https://img.example/1.png",
            extra={"type": "ShopItem::Sticker", "agh_contents": {"weight": 2}},
        ),
        CatalogEntry(id="abc", name="Mystery box", stock=0),
    ]


def test_missing_file_loads_as_none(store):
    assert store.load() is None


def test_empty_file_loads_as_none(store):
    store.path.write_text("  \n", encoding="utf-8")
    assert store.load() is None


def test_malformed_json_loads_as_none(store):
    store.path.write_text("[{not json", encoding="utf-8")
    assert store.load() is None


def test_non_array_loads_as_none(store):
    store.path.write_text('{"id": 1}', encoding="utf-8")
    assert store.load() is None


def test_entry_without_id_loads_as_none(store):
    store.path.write_text('[{"name": "no id"}]', encoding="utf-8")
    assert store.load() is None


def test_round_trip_preserves_all_fields(store):
    entries = _entries()
    assert store.save(entries) is True
    assert store.load() == entries


def test_saved_file_keeps_feed_keys(store):
    store.save(_entries())
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw[0]["ticket_cost"] == {"base_cost": 3, "us": 3, "eu": 4}
    assert raw[0]["type"] == "ShopItem::Sticker"
    assert raw[1]["id"] == "abc"


def test_save_overwrites_previous_content(store):
    store.save(_entries())
    store.save([CatalogEntry(id=9, name="Only one")])
    loaded = store.load()
    assert [e.id for e in loaded] == [9]


def test_save_creates_parent_directories(tmp_path):
    store = SnapshotStore(tmp_path / "state" / "nested" / "cache.json")
    assert store.save(_entries()) is True
    assert store.path.exists()


def test_save_failure_returns_false_and_leaves_no_temp_files(tmp_path):
    target = tmp_path / "cache.json"
    target.mkdir()  # a directory cannot be replaced by a file
    store = SnapshotStore(target)
    assert store.save(_entries()) is False
    assert [p.name for p in tmp_path.iterdir()] == ["cache.json"]
