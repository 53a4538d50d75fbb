"""Summary: Tests for execution context detection.

Importance: Ensures development hosts never reach the live portal Web API by default.
Alternatives: Verify environment detection manually in a browser.
"""

from __future__ import annotations

import pytest

from portalinbox.environment import HOSTED, LOCAL, classify, is_local


@pytest.mark.parametrize(
    "origin",
    [
        "http://localhost:8000",
        "http://127.0.0.1",
        "https://192.168.1.20/portal",
        "http://10.0.0.5:3000",
        "http://inbox-dev.local",
        "file:///home/dev/index.html",
        "localhost:8000",
    ],
)
def test_local_origins(origin: str) -> None:
    """Summary: Verify development origins classify as local.

    Importance: Local contexts must use the snapshot data source.
    Alternatives: Require an explicit environment flag.
    """

    assert classify(origin) == LOCAL
    assert is_local(origin)


@pytest.mark.parametrize(
    "origin",
    ["https://contoso.powerappsportals.com", "https://local.example.com", "https://example.local.gov", ""],
)
def test_hosted_origins(origin: str) -> None:
    assert classify(origin) == HOSTED
