"""Tests for the Slack Web API notifier."""

from unittest import mock

import pytest

from shop_monitor.models import ImageBlock, NotificationPayload, TextBlock
from shop_monitor.notifier import SlackAPIError, SlackNotifier


def _slack_reply(**body) -> mock.Mock:
    resp = mock.Mock(status_code=200)
    resp.json.return_value = body
    return resp


def _notifier(session) -> SlackNotifier:
    return SlackNotifier(token="xoxb-test", channel="C123", session=session)


def test_post_sends_blocks_to_channel():
    session = mock.Mock()
    session.post.return_value = _slack_reply(ok=True, ts="1700000000.000100")
    payload = NotificationPayload(
        text="Heidi found a new item: Jar!",
        blocks=[TextBlock("*Jar*"), ImageBlock("https://img.example/j.png", "Jar")],
    )

    ts = _notifier(session).post(payload)

    assert ts == "1700000000.000100"
    args, kwargs = session.post.call_args
    assert args[0] == "https://slack.com/api/chat.postMessage"
    assert kwargs["headers"]["Authorization"] == "Bearer xoxb-test"
    body = kwargs["json"]
    assert body["channel"] == "C123"
    assert body["text"] == "Heidi found a new item: Jar!"
    assert body["blocks"] == [
        {"type": "section", "text": {"type": "mrkdwn", "text": "*Jar*"}},
        {"type": "image", "image_url": "https://img.example/j.png", "alt_text": "Jar"},
    ]
    assert body["link_names"] is True
    assert body["unfurl_links"] is False
    assert body["unfurl_media"] is False


def test_post_without_blocks_omits_them():
    session = mock.Mock()
    session.post.return_value = _slack_reply(ok=True, ts="1")
    _notifier(session).post(NotificationPayload(text="hello"))
    assert "blocks" not in session.post.call_args.kwargs["json"]


def test_slack_error_raises():
    session = mock.Mock()
    session.post.return_value = _slack_reply(ok=False, error="channel_not_found")
    with pytest.raises(SlackAPIError) as exc:
        _notifier(session).post(NotificationPayload(text="hello"))
    assert exc.value.error == "channel_not_found"
    assert session.post.call_count == 1


def test_send_test_message_posts_then_deletes():
    session = mock.Mock()
    session.post.side_effect = [_slack_reply(ok=True, ts="42.1"), _slack_reply(ok=True)]

    _notifier(session).send_test_message(delete_after=0)

    (post_args, post_kwargs), (del_args, del_kwargs) = session.post.call_args_list
    assert post_args[0].endswith("/chat.postMessage")
    assert "Test Hello World" in post_kwargs["json"]["text"]
    assert del_args[0].endswith("/chat.delete")
    assert del_kwargs["json"] == {"channel": "C123", "ts": "42.1"}
