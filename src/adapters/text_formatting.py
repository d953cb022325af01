"""Display text formatting for items.

Keeping formatting here keeps the text shown in every output mode consistent
regardless of how rows are rendered.
"""

from __future__ import annotations

import html
import re
from urllib.parse import urlparse

from core.models import Item

_PARAGRAPH = re.compile(r"<p\s*/?>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def _url_host(url: str) -> str:
    host = urlparse(url).netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def _strip_markup(raw: str, strip_html: bool) -> str:
    if strip_html:
        text = _PARAGRAPH.sub(" ", raw)
        text = _TAG.sub("", text)
        return _WHITESPACE.sub(" ", html.unescape(text)).strip()
    return _PARAGRAPH.sub("\n\n", raw).strip()


def sanitize_and_format_title(item: Item, strip_html: bool = True) -> str:
    """Return the text shown for an item.

    Stories show their title plus the linked host; comments show their body.
    With ``strip_html`` the result is plain text on a single line; without it,
    paragraph tags become blank lines and other markup is left intact.
    """

    if item.deleted:
        return "[deleted]"
    if item.dead:
        return "[dead]"

    if item.title:
        title = html.unescape(item.title).strip() if strip_html else item.title.strip()
        host = _url_host(item.url) if item.url else ""
        if host:
            return f"{title} ({host})"
        return title

    return _strip_markup(item.text, strip_html)
