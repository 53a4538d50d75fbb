"""Summary: Execution context detection for the portal inbox.

Importance: Decides whether the snapshot file or the portal Web API backs the inbox.
Alternatives: Require callers to choose the data source explicitly.
"""

from __future__ import annotations

from urllib.parse import urlsplit

LOCAL = "local"
HOSTED = "hosted"

_LOCAL_HOSTS = {"localhost", "127.0.0.1"}
_PRIVATE_PREFIXES = ("192.168.", "10.")


def classify(origin: str) -> str:
    """Summary: Classify an origin URL as local or hosted.

    Importance: Local development hosts and file URLs must not hit the live Web API.
    Alternatives: Read an explicit environment flag instead of inspecting the origin.
    """

    parts = urlsplit(origin or "")
    if parts.scheme.lower() == "file":
        return LOCAL
    if not parts.netloc:
        # Bare hosts such as "localhost:8000" carry no "//" and parse as a scheme or path.
        parts = urlsplit("//" + (origin or ""))
    hostname = (parts.hostname or "").lower()
    if hostname in _LOCAL_HOSTS:
        return LOCAL
    if hostname.startswith(_PRIVATE_PREFIXES) or hostname.endswith(".local"):
        return LOCAL
    return HOSTED


def is_local(origin: str) -> bool:
    return classify(origin) == LOCAL
