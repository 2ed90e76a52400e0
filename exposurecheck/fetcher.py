from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from .models import CheckTarget, FetchResult

SOCKET_TIMEOUT = 2.0
MAX_BODY_BYTES = 1024 * 1024


async def fetch_target(
    target: CheckTarget,
    base_url: str,
    client: httpx.AsyncClient,
    timeout: float = SOCKET_TIMEOUT,
    max_bytes: int = MAX_BODY_BYTES,
    logger: Optional[logging.Logger] = None,
) -> FetchResult:
    """GET a target below base_url without following redirects.

    timeout bounds the whole request, body included, not just each socket
    operation. Transport errors never propagate; they are recorded in
    FetchResult.error. The body is streamed and capped at max_bytes, so a
    marker past the cap is not seen.
    """
    url = target.url(base_url)
    log = logger or logging.getLogger(__name__)
    try:
        log.debug("GET %s", url)
        return await asyncio.wait_for(_get(client, url, timeout, max_bytes), timeout)
    except asyncio.TimeoutError:
        log.debug("GET %s exceeded %.1fs deadline", url, timeout)
        return _failed(url, f"TimeoutError: no complete response within {timeout}s")
    except httpx.InvalidURL as e:
        log.debug("GET %s failed: %s: %s", url, type(e).__name__, e)
        # Re-issuing the same URL cannot succeed
        return _failed(url, f"{type(e).__name__}: {e}", retryable=False)
    except httpx.HTTPError as e:
        log.debug("GET %s failed: %s: %s", url, type(e).__name__, e)
        return _failed(url, f"{type(e).__name__}: {e}")


async def _get(client: httpx.AsyncClient, url: str, timeout: float, max_bytes: int) -> FetchResult:
    async with client.stream(
        "GET",
        url,
        timeout=timeout,
        follow_redirects=False,
        headers={"Accept": "*/*"},
    ) as r:
        buf = bytearray()
        async for chunk in r.aiter_bytes():
            remaining = max_bytes - len(buf)
            if remaining <= 0:
                break
            buf.extend(chunk[:remaining])
        return FetchResult(
            url=url,
            status_code=r.status_code,
            headers=dict(r.headers),
            body=bytes(buf),
            error=None,
        )


def _failed(url: str, error: str, retryable: bool = True) -> FetchResult:
    return FetchResult(
        url=url,
        status_code=None,
        headers={},
        body=None,
        error=error,
        retryable=retryable,
    )
