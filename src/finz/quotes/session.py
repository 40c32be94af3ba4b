"""Session credential cache for the quote provider.

The provider authorizes data requests with a token ("crumb") that is only
issued to a client holding a session cookie. Acquisition is a two-step
handshake:

    session endpoint → Set-Cookie → token endpoint (with cookie) → token

``SessionCache`` owns the resulting credential, hands it out until it
expires, and guarantees that concurrent callers racing on a missing or
expired credential share exactly one acquisition.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

import httpx

from finz.core.config import HttpConfig, YahooConfig
from finz.core.exceptions import AuthError
from finz.core.http import NO_CACHE_HEADERS, browser_headers
from finz.core.models import Credential

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@runtime_checkable
class CredentialSource(Protocol):
    """Performs one credential acquisition against the provider."""

    async def fetch_credential(self) -> tuple[str, str]:
        """Return a fresh ``(token, cookie)`` pair.

        Raises:
            AuthError: The provider did not issue a usable credential.
        """
        ...


class YahooSessionSource:
    """Handshake + token request against the quote provider.

    No retries: any failure propagates immediately as ``AuthError``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: YahooConfig,
        http_config: HttpConfig,
    ) -> None:
        self._client = client
        self._config = config
        self._headers = {**browser_headers(http_config), **NO_CACHE_HEADERS}

    async def fetch_credential(self) -> tuple[str, str]:
        cookie = await self._fetch_cookie()
        token = await self._fetch_token(cookie)
        return token, cookie

    async def _fetch_cookie(self) -> str:
        url = self._config.handshake_url
        try:
            response = await self._client.get(
                url, headers=self._headers, follow_redirects=False
            )
        except httpx.RequestError as e:
            raise AuthError(
                f"Session handshake failed: {e}",
                context={"stage": "handshake", "url": url},
            ) from e

        set_cookie = response.headers.get("set-cookie", "")
        cookie = set_cookie.split(";")[0].strip()
        if not cookie:
            raise AuthError(
                "Session handshake returned no cookie",
                context={"stage": "handshake", "status_code": response.status_code},
            )
        return cookie

    async def _fetch_token(self, cookie: str) -> str:
        url = self._config.token_url
        try:
            response = await self._client.get(
                url, headers={**self._headers, "Cookie": cookie}
            )
        except httpx.RequestError as e:
            raise AuthError(
                f"Token request failed: {e}",
                context={"stage": "token", "url": url},
            ) from e

        if not response.is_success:
            raise AuthError(
                f"Token request returned HTTP {response.status_code}",
                context={"stage": "token", "status_code": response.status_code},
            )

        token = response.text.strip()
        if not token or "unauthorized" in token.lower():
            raise AuthError(
                "Provider issued an empty or unauthorized token",
                context={"stage": "token", "status_code": response.status_code},
            )
        return token


class SessionCache:
    """Caches one provider credential with a TTL and single-flight refresh.

    Parameters
    ----------
    source : CredentialSource
        Performs the actual handshake when the cache misses.
    ttl : timedelta
        Lifetime of an acquired credential. Default: 20 minutes.
    clock : Callable[[], datetime]
        Time source, injectable for tests. Default: ``utc_now``.
    """

    def __init__(
        self,
        source: CredentialSource,
        ttl: timedelta = timedelta(minutes=20),
        clock: Clock = utc_now,
    ) -> None:
        self._source = source
        self._ttl = ttl
        self._clock = clock
        self._credential: Credential | None = None
        self._pending: asyncio.Future[Credential] | None = None

    @property
    def credential(self) -> Credential | None:
        """The cached credential, expired or not."""
        return self._credential

    @property
    def acquiring(self) -> bool:
        return self._pending is not None

    async def get_credential(self) -> Credential:
        """Return a valid credential, acquiring one if needed.

        Raises:
            AuthError: The acquisition this call joined failed.
        """
        cached = self._credential
        if cached is not None and not cached.is_expired(self._clock()):
            return cached

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._acquire())
        # shield: one caller being cancelled must not abort the shared attempt
        return await asyncio.shield(self._pending)

    def invalidate(self, credential: Credential | None = None) -> None:
        """Drop the cached credential.

        When ``credential`` is given, only drop it if it is still the cached
        one, so a stale failure cannot evict a newer credential.
        """
        if credential is None or self._credential is credential:
            self._credential = None

    async def _acquire(self) -> Credential:
        try:
            logger.info("Acquiring quote provider session")
            token, cookie = await self._source.fetch_credential()
            credential = Credential(
                token=token,
                cookie=cookie,
                expires_at=self._clock() + self._ttl,
            )
            self._credential = credential
            return credential
        except AuthError:
            logger.warning("Quote provider session acquisition failed")
            raise
        finally:
            self._pending = None
