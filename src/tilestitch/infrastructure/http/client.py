from __future__ import annotations

import asyncio
import ssl

import aiohttp
import certifi

from tilestitch.errors import TileFetchError
from tilestitch.shared.constants import (
    ASYNC_MAX_CONCURRENCY,
    DEFAULT_USER_AGENT,
    HTTP_TIMEOUT_DEFAULT,
)


def make_http_session(
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout_s: float = HTTP_TIMEOUT_DEFAULT,
    limit: int = ASYNC_MAX_CONCURRENCY,
) -> aiohttp.ClientSession:
    """Create a session with certifi CA bundle; ``timeout_s <= 0`` disables the per-request limit."""
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context, limit=max(1, limit))
    timeout = aiohttp.ClientTimeout(total=timeout_s if timeout_s > 0 else None)
    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        headers={'User-Agent': user_agent},
    )


async def fetch_tile_bytes(client: aiohttp.ClientSession, url: str) -> tuple[int, bytes]:
    """
    GET ``url`` once and return ``(status, body)``.

    Transport failures (connection errors, timeouts, broken payloads) are
    raised as :class:`TileFetchError`; HTTP status codes are returned as-is.
    """
    try:
        async with client.get(url) as resp:
            body = await resp.read()
            return resp.status, body
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        msg = f'transport error for {url}: {e!r}'
        raise TileFetchError(msg, url=url) from e
