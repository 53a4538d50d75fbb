"""Summary: Tests for message presentation helpers.

Importance: Ensures bodies keep links but lose anything executable.
Alternatives: Rely on front-end sanitizers only.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from portalinbox.formatting import (
    escape_html,
    format_relative_date,
    initials,
    is_external_link,
    sanitize_html_for_links,
)

NOW = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)


def test_sanitize_keeps_links_and_drops_other_tags() -> None:
    """Summary: Verify anchors survive while scripts and styling are removed.

    Importance: Message bodies come from staff-authored rich text.
    Alternatives: Escape the entire body.
    """

    markup = '<p>See <a href="https://example.gov/a">this</a></p><script>alert(1)</script>'
    result = sanitize_html_for_links(markup)
    assert "<p>" not in result
    assert "<script>" not in result
    assert 'href="https://example.gov/a"' in result
    assert 'target="_blank"' in result
    assert 'rel="noopener noreferrer"' in result
    assert 'data-portal-link="true"' in result
    assert result.startswith("See <a ")


def test_sanitize_drops_javascript_href_and_closes_links() -> None:
    result = sanitize_html_for_links('<a href="javascript:alert(1)">click')
    assert "javascript" not in result
    assert result.endswith("click</a>")


def test_sanitize_escapes_text() -> None:
    assert sanitize_html_for_links("1 &lt; 2") == "1 &lt; 2"
    assert sanitize_html_for_links("") == ""


def test_escape_html() -> None:
    assert escape_html('<b>"x"</b>') == "&lt;b&gt;&quot;x&quot;&lt;/b&gt;"


def test_format_relative_date_buckets() -> None:
    assert format_relative_date(NOW - timedelta(seconds=20), now=NOW) == "Just now"
    assert format_relative_date(NOW - timedelta(minutes=1), now=NOW) == "1 minute ago"
    assert format_relative_date(NOW - timedelta(minutes=5), now=NOW) == "5 minutes ago"
    assert format_relative_date(NOW - timedelta(hours=1), now=NOW) == "1 hour ago"
    assert format_relative_date(NOW - timedelta(hours=3), now=NOW) == "3 hours ago"
    assert format_relative_date(NOW - timedelta(days=1), now=NOW) == "1 day ago"
    assert format_relative_date(NOW - timedelta(days=4), now=NOW) == "4 days ago"
    assert format_relative_date(NOW - timedelta(days=9), now=NOW) == "2025-06-01"


def test_format_relative_date_custom_labels() -> None:
    labels = {
        "just_now": "A l'instant",
        "minute_ago": "minute",
        "minutes_ago": "minutes",
        "hour_ago": "heure",
        "hours_ago": "heures",
        "day_ago": "jour",
        "days_ago": "jours",
    }
    assert format_relative_date(NOW - timedelta(hours=2), now=NOW, labels=labels) == "2 heures"


def test_initials() -> None:
    assert initials("Program Support") == "PS"
    assert initials("support") == "SU"
    assert initials("") == ""


def test_is_external_link() -> None:
    origin = "https://portal.example.gov"
    assert is_external_link("https://other.example.com/x", origin) is True
    assert is_external_link("/applications", origin) is False
    assert is_external_link("https://portal.example.gov/help", origin) is False
    assert is_external_link("mailto:help@example.gov", origin) is False
