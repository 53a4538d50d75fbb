"""Summary: Request verification token sources for the portal Web API.

Importance: Every Web API call must carry a fresh anti-forgery token from the host portal.
Alternatives: Disable token validation on the portal.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

import httpx

from portalinbox.errors import AuthUnavailable
from portalinbox.transport import client_scope


logger = logging.getLogger(__name__)

TOKEN_NAME = "__RequestVerificationToken"

_TAG_RE = re.compile(r"<(?:input|meta)\b[^>]*>", re.IGNORECASE)
_VALUE_RE = re.compile(r"""\b(?:value|content)\s*=\s*["']([^"']*)["']""", re.IGNORECASE)


class TokenProvider(ABC):
    """Summary: Abstract source of request verification tokens.

    Importance: Separates how the host hands out tokens from the Web API client.
    Alternatives: Read the token from a global variable.
    """

    @abstractmethod
    async def get_token(self) -> str:
        """Return a token or raise AuthUnavailable."""


class StaticTokenProvider(TokenProvider):
    """Returns a token supplied up front by the host."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    async def get_token(self) -> str:
        if not self._token:
            raise AuthUnavailable()
        return self._token


class PortalTokenProvider(TokenProvider):
    """Summary: Fetches the token from the portal's token endpoint.

    Importance: Matches how portal pages obtain tokens for Web API calls.
    Alternatives: Scrape the token from an arbitrary portal page.
    """

    def __init__(self, token_url: str, client: httpx.AsyncClient | None = None) -> None:
        self._token_url = token_url
        self._client = client

    async def get_token(self) -> str:
        try:
            async with client_scope(self._client) as client:
                response = await client.get(self._token_url)
        except httpx.HTTPError as exc:
            logger.error("Token request to %s failed: %s", self._token_url, exc)
            raise AuthUnavailable("Failed to get authentication token") from exc
        if not response.is_success:
            logger.error("Token endpoint returned status %s", response.status_code)
            raise AuthUnavailable("Failed to get authentication token")
        token = extract_token(response.text)
        if not token:
            raise AuthUnavailable()
        return token


def extract_token(markup: str) -> str | None:
    """Summary: Pull the verification token out of an input or meta tag.

    Importance: The token endpoint returns HTML rather than JSON.
    Alternatives: Parse the markup with a full HTML parser.
    """

    for tag in _TAG_RE.findall(markup or ""):
        if TOKEN_NAME not in tag:
            continue
        match = _VALUE_RE.search(tag)
        if match and match.group(1):
            return match.group(1)
    return None
