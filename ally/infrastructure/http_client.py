"""
HTTP transport helpers.

Drivers accept an optional shared httpx.AsyncClient. When none is given a
short-lived client is opened for the call, with the configured timeout.
Timeouts and connection limits are the transport's concern, not the driver's.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


@asynccontextmanager
async def open_client(
    client: Optional[httpx.AsyncClient], timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the shared client, or a fresh one closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned
