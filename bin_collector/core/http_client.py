"""
bin_collector/core/http_client.py
Shared async httpx client.
  • plain_client() → lazily created client for the Simbio endpoint
  • close_all()    → called from the app lifespan on shutdown
"""

import httpx
from bin_collector.core.config import REQUEST_TIMEOUT_S

_plain_client: httpx.AsyncClient | None = None

_LIMITS  = httpx.Limits(max_connections=4, max_keepalive_connections=2)
CONNECT_TIMEOUT_S = 5.0


def request_timeout(total_s: float) -> httpx.Timeout:
    """Per-operation limits for one call, keeping the shorter connect timeout."""
    return httpx.Timeout(total_s, connect=min(CONNECT_TIMEOUT_S, total_s))


_TIMEOUT = request_timeout(REQUEST_TIMEOUT_S)

_HEADERS = {
    "User-Agent": "bin-collector/1.0 (+home-assistant add-on)",
    "Accept":     "application/json, text/plain, */*",
}


def plain_client() -> httpx.AsyncClient:
    global _plain_client
    if _plain_client is None or _plain_client.is_closed:
        _plain_client = httpx.AsyncClient(
            headers=_HEADERS,
            timeout=_TIMEOUT,
            follow_redirects=True,
            limits=_LIMITS,
        )
    return _plain_client


async def close_all() -> None:
    global _plain_client
    if _plain_client and not _plain_client.is_closed:
        await _plain_client.aclose()
    _plain_client = None
