"""Summary: Shared httpx client handling.

Importance: Lets tests inject a client with a mock transport while production code opens its own.
Alternatives: Create a new client inside every request function.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx


@asynccontextmanager
async def client_scope(client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
    """Summary: Yield the injected client, or a short-lived one that is closed afterwards.

    Importance: Injected clients stay owned by the caller and are never closed here.
    Alternatives: Always require an injected client.
    """

    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(trust_env=False) as owned:
        yield owned
