"""Tests for finz.quotes.session (SessionCache, YahooSessionSource)."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import respx

from finz.core.exceptions import AuthError
from finz.quotes.session import CredentialSource, SessionCache, YahooSessionSource

HANDSHAKE_URL = "https://fc.yahoo.com"
TOKEN_URL = "https://query1.finance.yahoo.com/v1/test/getcrumb"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class CountingSource:
    """Credential source that yields control before answering."""

    def __init__(self, fail: bool = False) -> None:
        self.calls = 0
        self.fail = fail

    async def fetch_credential(self) -> tuple[str, str]:
        self.calls += 1
        await asyncio.sleep(0.01)
        if self.fail:
            raise AuthError("token rejected", context={"stage": "token"})
        return f"token-{self.calls}", f"A3=cookie-{self.calls}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


# --- SessionCache ---


class TestSessionCache:
    def test_source_satisfies_protocol(self):
        assert isinstance(CountingSource(), CredentialSource)

    async def test_acquires_on_first_call(self, clock):
        source = CountingSource()
        cache = SessionCache(source, clock=clock)
        cred = await cache.get_credential()
        assert cred.token == "token-1"
        assert cred.cookie == "A3=cookie-1"
        assert cred.expires_at == clock.now + timedelta(minutes=20)

    async def test_reuses_fresh_credential(self, clock):
        source = CountingSource()
        cache = SessionCache(source, clock=clock)
        first = await cache.get_credential()
        clock.advance(timedelta(minutes=19))
        second = await cache.get_credential()
        assert second is first
        assert source.calls == 1

    async def test_expired_credential_not_reused(self, clock):
        source = CountingSource()
        cache = SessionCache(source, clock=clock)
        first = await cache.get_credential()
        clock.advance(timedelta(minutes=21))
        second = await cache.get_credential()
        assert second.token != first.token
        assert source.calls == 2

    async def test_concurrent_callers_share_one_acquisition(self, clock):
        source = CountingSource()
        cache = SessionCache(source, clock=clock)
        results = await asyncio.gather(*(cache.get_credential() for _ in range(5)))
        assert source.calls == 1
        assert {r.token for r in results} == {"token-1"}
        assert not cache.acquiring

    async def test_failure_propagates_to_all_waiters(self, clock):
        source = CountingSource(fail=True)
        cache = SessionCache(source, clock=clock)
        results = await asyncio.gather(
            *(cache.get_credential() for _ in range(3)), return_exceptions=True
        )
        assert source.calls == 1
        assert all(isinstance(r, AuthError) for r in results)
        assert cache.credential is None
        assert not cache.acquiring

    async def test_next_call_after_failure_retries(self, clock):
        source = CountingSource(fail=True)
        cache = SessionCache(source, clock=clock)
        with pytest.raises(AuthError):
            await cache.get_credential()
        source.fail = False
        cred = await cache.get_credential()
        assert cred.token == "token-2"

    async def test_invalidate_forces_reacquire(self, clock):
        source = CountingSource()
        cache = SessionCache(source, clock=clock)
        await cache.get_credential()
        cache.invalidate()
        cred = await cache.get_credential()
        assert cred.token == "token-2"

    async def test_invalidate_stale_credential_keeps_newer(self, clock):
        source = CountingSource()
        cache = SessionCache(source, clock=clock)
        stale = await cache.get_credential()
        cache.invalidate()
        fresh = await cache.get_credential()
        cache.invalidate(stale)
        assert cache.credential is fresh

    async def test_custom_ttl(self, clock):
        source = CountingSource()
        cache = SessionCache(source, ttl=timedelta(seconds=30), clock=clock)
        await cache.get_credential()
        clock.advance(timedelta(seconds=30))
        await cache.get_credential()
        assert source.calls == 2


# --- YahooSessionSource ---


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture
def source(http_client, yahoo_config, http_config) -> YahooSessionSource:
    return YahooSessionSource(http_client, yahoo_config, http_config)


class TestYahooSessionSource:
    @respx.mock
    async def test_handshake_then_token(self, source):
        respx.get(HANDSHAKE_URL).mock(
            return_value=httpx.Response(
                404, headers={"set-cookie": "A3=d=AQAB; Expires=Sun; Domain=.yahoo.com"}
            )
        )
        token_route = respx.get(TOKEN_URL).mock(
            return_value=httpx.Response(200, text="abcDEF123")
        )
        token, cookie = await source.fetch_credential()
        assert token == "abcDEF123"
        assert cookie == "A3=d=AQAB"
        assert token_route.calls.last.request.headers["Cookie"] == "A3=d=AQAB"

    @respx.mock
    async def test_sends_browser_headers(self, source):
        handshake = respx.get(HANDSHAKE_URL).mock(
            return_value=httpx.Response(200, headers={"set-cookie": "A3=x"})
        )
        respx.get(TOKEN_URL).mock(return_value=httpx.Response(200, text="tok"))
        await source.fetch_credential()
        headers = handshake.calls.last.request.headers
        assert headers["User-Agent"].startswith("Mozilla/5.0")
        assert headers["Cache-Control"] == "no-cache"

    @respx.mock
    async def test_missing_cookie(self, source):
        respx.get(HANDSHAKE_URL).mock(return_value=httpx.Response(404))
        with pytest.raises(AuthError, match="no cookie") as exc_info:
            await source.fetch_credential()
        assert exc_info.value.context["stage"] == "handshake"

    @respx.mock
    async def test_token_rejected_status(self, source):
        respx.get(HANDSHAKE_URL).mock(
            return_value=httpx.Response(200, headers={"set-cookie": "A3=x"})
        )
        respx.get(TOKEN_URL).mock(return_value=httpx.Response(401, text="Unauthorized"))
        with pytest.raises(AuthError, match="HTTP 401"):
            await source.fetch_credential()

    @respx.mock
    async def test_unauthorized_body(self, source):
        respx.get(HANDSHAKE_URL).mock(
            return_value=httpx.Response(200, headers={"set-cookie": "A3=x"})
        )
        respx.get(TOKEN_URL).mock(
            return_value=httpx.Response(200, text='{"finance":{"error":{"code":"Unauthorized"}}}')
        )
        with pytest.raises(AuthError, match="unauthorized"):
            await source.fetch_credential()

    @respx.mock
    async def test_transport_failure(self, source):
        respx.get(HANDSHAKE_URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(AuthError, match="handshake failed"):
            await source.fetch_credential()


class TestSingleFlightOverHttp:
    @respx.mock
    async def test_five_callers_one_round_trip(self, source, clock):
        handshake = respx.get(HANDSHAKE_URL).mock(
            return_value=httpx.Response(200, headers={"set-cookie": "A3=x"})
        )
        token_route = respx.get(TOKEN_URL).mock(
            return_value=httpx.Response(200, text="shared")
        )
        cache = SessionCache(source, clock=clock)
        results = await asyncio.gather(*(cache.get_credential() for _ in range(5)))
        assert handshake.call_count == 1
        assert token_route.call_count == 1
        assert [r.token for r in results] == ["shared"] * 5
