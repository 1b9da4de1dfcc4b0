"""Tests for configuration helpers."""

import pytest

from shop_monitor import config


@pytest.mark.parametrize(
    "value, expected",
    [
        ("https://hackclub.slack.com/archives/C09ABCDEF12", "C09ABCDEF12"),
        ("https://app.slack.com/client/T01/archives/c0lower/p1700", "c0lower"),
        ("C09ABCDEF12", "C09ABCDEF12"),
        ("", None),
        (None, None),
    ],
)
def test_get_channel_id(value, expected):
    assert config.get_channel_id(value) == expected


@pytest.mark.parametrize(
    "value, default, expected",
    [("true", False, True), ("YES", False, True), ("0", True, False), (None, True, True)],
)
def test_parse_bool(value, default, expected):
    assert config._parse_bool(value, default) is expected


def test_parse_int_falls_back_on_garbage():
    assert config._parse_int("abc", 7) == 7
    assert config._parse_int("300000", 7) == 300000


def test_get_list_normalises(monkeypatch):
    monkeypatch.setenv("TRACKED_FIELDS", " Price, stock ,,name")
    assert config._get_list("TRACKED_FIELDS") == ["price", "stock", "name"]


@pytest.fixture
def valid_config(monkeypatch):
    monkeypatch.setattr(config, "SLACK_BOT_TOKEN", "xoxb-test")
    monkeypatch.setattr(config, "SLACK_CHANNEL_ID", "C123")
    monkeypatch.setattr(config, "TRACKED_FIELDS", ["price", "stock"])


def test_validate_accepts_complete_config(valid_config):
    config.validate()


def test_validate_requires_token(valid_config, monkeypatch):
    monkeypatch.setattr(config, "SLACK_BOT_TOKEN", None)
    with pytest.raises(RuntimeError, match="SLACK_BOT_TOKEN"):
        config.validate()


def test_validate_requires_channel(valid_config, monkeypatch):
    monkeypatch.setattr(config, "SLACK_CHANNEL_ID", None)
    with pytest.raises(RuntimeError, match="SLACK_CHANNEL_URL"):
        config.validate()


def test_validate_rejects_unknown_fields(valid_config, monkeypatch):
    monkeypatch.setattr(config, "TRACKED_FIELDS", ["price", "colour"])
    with pytest.raises(RuntimeError, match="colour"):
        config.validate()


@pytest.mark.parametrize("raw", ["", " , "])
def test_blank_tracked_fields_means_all(monkeypatch, raw):
    monkeypatch.setenv("TRACKED_FIELDS", raw)
    assert config._get_tracked_fields() == list(config.KNOWN_FIELDS)


def test_tracked_fields_unset_means_all(monkeypatch):
    monkeypatch.delenv("TRACKED_FIELDS", raising=False)
    assert config._get_tracked_fields() == list(config.KNOWN_FIELDS)


def test_tracked_fields_narrowed(monkeypatch):
    monkeypatch.setenv("TRACKED_FIELDS", "stock,Price")
    assert config._get_tracked_fields() == ["stock", "price"]
