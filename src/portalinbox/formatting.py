"""Summary: Presentation helpers for message bodies and dates.

Importance: Gives any host UI the same links-only body sanitizing and relative dates.
Alternatives: Leave sanitizing to each front end.
"""

from __future__ import annotations

import html
from datetime import datetime, timezone
from html.parser import HTMLParser
from urllib.parse import urljoin, urlsplit


TIME_LABELS = {
    "just_now": "Just now",
    "minute_ago": "minute ago",
    "minutes_ago": "minutes ago",
    "hour_ago": "hour ago",
    "hours_ago": "hours ago",
    "day_ago": "day ago",
    "days_ago": "days ago",
}


class _LinkOnlySanitizer(HTMLParser):
    """Keeps anchor tags and text; every other tag is dropped."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._open_links = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "a":
            return
        values = dict(attrs)
        href = values.get("href")
        target = values.get("target") or "_blank"
        rendered = []
        if href and not href.strip().lower().startswith("javascript:"):
            rendered.append(f'href="{html.escape(href, quote=True)}"')
        rendered.append(f'target="{html.escape(target, quote=True)}"')
        rendered.append('rel="noopener noreferrer"')
        rendered.append('data-portal-link="true"')
        self._parts.append(f"<a {' '.join(rendered)}>")
        self._open_links += 1

    def handle_endtag(self, tag: str) -> None:
        if tag == "a" and self._open_links:
            self._parts.append("</a>")
            self._open_links -= 1

    def handle_data(self, data: str) -> None:
        self._parts.append(html.escape(data, quote=False))

    def result(self) -> str:
        self.close()
        return "".join(self._parts) + "</a>" * self._open_links


def sanitize_html_for_links(markup: str) -> str:
    """Summary: Reduce HTML to text plus safe anchor tags.

    Importance: Message bodies may carry links but nothing else that could run or restyle the page.
    Alternatives: Escape the whole body and lose clickable links.
    """

    sanitizer = _LinkOnlySanitizer()
    sanitizer.feed(markup or "")
    return sanitizer.result()


def escape_html(text: str) -> str:
    return html.escape(text or "", quote=True)


def format_relative_date(
    value: datetime, now: datetime | None = None, labels: dict[str, str] = TIME_LABELS
) -> str:
    """Summary: Format a timestamp relative to now.

    Importance: Matches the inbox list's "5 minutes ago" style.
    Alternatives: Always show absolute timestamps.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = (now - value).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 1:
        return labels["just_now"]
    if minutes == 1:
        return f"1 {labels['minute_ago']}"
    if minutes < 60:
        return f"{minutes} {labels['minutes_ago']}"
    if hours == 1:
        return f"1 {labels['hour_ago']}"
    if hours < 24:
        return f"{hours} {labels['hours_ago']}"
    if days == 1:
        return f"1 {labels['day_ago']}"
    if days < 7:
        return f"{days} {labels['days_ago']}"
    return value.date().isoformat()


def initials(name: str) -> str:
    words = (name or "").split()
    if len(words) >= 2:
        return (words[0][0] + words[1][0]).upper()
    return (name or "").strip()[:2].upper()


def is_external_link(url: str, origin: str) -> bool:
    """Summary: Tell whether a link leaves the portal's host.

    Importance: External links get a confirmation prompt before navigation.
    Alternatives: Treat every absolute URL as external.
    """

    resolved = urlsplit(urljoin(origin.rstrip("/") + "/", url))
    if resolved.scheme not in {"http", "https"}:
        return False
    return (resolved.hostname or "") != (urlsplit(origin).hostname or "")
