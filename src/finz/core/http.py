"""Shared outbound HTTP plumbing: browser headers and no-cache JSON GETs."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from finz.core.config import HttpConfig
from finz.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

# Every call must reach the live provider, never an intermediate cache.
NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def browser_headers(config: HttpConfig) -> dict[str, str]:
    """Fixed browser-like header set sent with every provider request."""
    return {
        "User-Agent": config.user_agent,
        "Accept": config.accept,
        "Accept-Language": config.accept_language,
    }


def create_http_client(config: HttpConfig) -> httpx.AsyncClient:
    """Build the process-wide async HTTP client."""
    return httpx.AsyncClient(
        headers=browser_headers(config),
        timeout=httpx.Timeout(config.request_timeout),
    )


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """GET `url` and parse the body as JSON.

    Raises:
        UpstreamError: Transport failure, non-2xx status, or a body that is
            not valid JSON. `status` is None for transport failures.
    """
    request_headers = {**NO_CACHE_HEADERS, **(headers or {})}
    try:
        response = await client.get(url, params=params, headers=request_headers)
    except httpx.RequestError as e:
        raise UpstreamError(
            f"Request to {url} failed: {e}",
            context={"url": url, "error": str(e)},
        ) from e

    if not response.is_success:
        raise UpstreamError(
            f"HTTP {response.status_code} from {url}",
            status=response.status_code,
            context={"url": url},
        )

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"Invalid JSON from {url}",
            status=response.status_code,
            context={"url": url, "response_body": response.text[:200]},
        ) from e
