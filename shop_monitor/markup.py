"""Markdown -> Slack mrkdwn translation.

Shop descriptions are written in plain markdown; Slack uses its own
dialect (``*bold*``, ``_italic_``, ``~strike~``, ``<url|label>``).
"""

from __future__ import annotations

import re
from typing import Optional

ELLIPSIS = "…"
NONE_TEXT = "_None_"

# Stand-in for bold markers while the italic pass runs.
_BOLD = "\x02"

_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BOLD_STARS = re.compile(r"\*\*(.*?)\*\*")
_BOLD_UNDERSCORES = re.compile(r"__(.*?)__")
_ITALIC = re.compile(r"\*([^*]+)\*")
_STRIKE = re.compile(r"~~(.*?)~~")
_HEADING = re.compile(r"^#+\s*(.*)$", re.MULTILINE)


def markdown_to_slack(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    out = _LINK.sub(r"<\2|\1>", text)
    out = _BOLD_STARS.sub(rf"{_BOLD}\1{_BOLD}", out)
    out = _BOLD_UNDERSCORES.sub(rf"{_BOLD}\1{_BOLD}", out)
    out = _ITALIC.sub(r"_\1_", out)
    out = out.replace(_BOLD, "*")
    out = _STRIKE.sub(r"~\1~", out)
    out = _HEADING.sub(r"*\1*", out)
    return out


def truncate(text, limit: int = 500) -> str:
    """Cut ``text`` to ``limit`` characters plus an ellipsis.

    Not markup-aware: a cut can land inside a link or emphasis span.
    """
    if text is None or text == "":
        return NONE_TEXT
    s = str(text)
    return f"{s[:limit]}{ELLIPSIS}" if len(s) > limit else s


__all__ = ["markdown_to_slack", "truncate", "ELLIPSIS", "NONE_TEXT"]
