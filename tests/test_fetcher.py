import asyncio
import json

import aiohttp
import pytest

from conftest import ATLAS, FakeSession
from ratedstats_roster.errors import AuthRejected, DecodeError, NetworkError, NotFound
from ratedstats_roster.fetcher import RateLimiter, ResourceFetcher


@pytest.mark.asyncio
async def test_fetch_returns_decoded_json_and_sends_bearer(fetcher, session):
    data = await fetcher.fetch(ATLAS, "tok-1")
    assert data["name"] == "Atlas"

    call = session.calls[0]
    assert call["headers"] == {"Authorization": "Bearer tok-1"}
    assert call["params"] == {"namespace": "profile-eu", "locale": "en_GB"}
    assert fetcher.metrics["200"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,error",
    [(401, AuthRejected), (404, NotFound), (429, NetworkError), (503, NetworkError)],
)
async def test_fetch_maps_status_codes(settings, status, error):
    fetcher = ResourceFetcher(settings, FakeSession({ATLAS: (status, {})}), limiters=[])
    with pytest.raises(error):
        await fetcher.fetch(ATLAS, "tok-1")


@pytest.mark.asyncio
async def test_network_error_keeps_status(settings):
    fetcher = ResourceFetcher(settings, FakeSession({ATLAS: (502, {})}), limiters=[])
    with pytest.raises(NetworkError) as info:
        await fetcher.fetch(ATLAS, "tok-1")
    assert info.value.status == 502
    assert fetcher.metrics["5xx"] == 1


@pytest.mark.asyncio
async def test_fetch_never_retries(settings):
    session = FakeSession({ATLAS: (401, {})})
    fetcher = ResourceFetcher(settings, session, limiters=[])
    with pytest.raises(AuthRejected):
        await fetcher.fetch(ATLAS, "tok-1")
    assert session.count(ATLAS) == 1


@pytest.mark.asyncio
async def test_timeout_is_network_error(settings):
    fetcher = ResourceFetcher(settings, FakeSession({ATLAS: asyncio.TimeoutError()}), limiters=[])
    with pytest.raises(NetworkError, match="timed out"):
        await fetcher.fetch(ATLAS, "tok-1")


@pytest.mark.asyncio
async def test_client_error_is_network_error(settings):
    session = FakeSession({ATLAS: aiohttp.ClientConnectionError("reset by peer")})
    fetcher = ResourceFetcher(settings, session, limiters=[])
    with pytest.raises(NetworkError, match="reset by peer"):
        await fetcher.fetch(ATLAS, "tok-1")


@pytest.mark.asyncio
async def test_bad_json_is_decode_error(settings):
    bad = json.JSONDecodeError("Expecting value", "<html>", 0)
    fetcher = ResourceFetcher(settings, FakeSession({ATLAS: (200, bad)}), limiters=[])
    with pytest.raises(DecodeError):
        await fetcher.fetch(ATLAS, "tok-1")


@pytest.mark.asyncio
async def test_rate_limiter_allows_burst_up_to_capacity():
    limiter = RateLimiter(3, 1)
    for _ in range(3):
        await limiter.acquire()
    assert limiter.tokens < 1


@pytest.mark.asyncio
async def test_fetch_goes_through_every_limiter(settings, session):
    per_sec = RateLimiter(5, 1)
    per_hour = RateLimiter(100, 3600)
    fetcher = ResourceFetcher(settings, session, limiters=[per_sec, per_hour])
    await fetcher.fetch(ATLAS, "tok-1")
    assert per_sec.tokens < 5
    assert per_hour.tokens < 100
