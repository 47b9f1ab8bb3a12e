from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import urlparse

import pytest

from ratedstats_roster.auth import TokenManager
from ratedstats_roster.config import Settings
from ratedstats_roster.errors import NotFound
from ratedstats_roster.fetcher import ResourceFetcher
from ratedstats_roster.models import BracketResult, CharacterSnapshot
from ratedstats_roster.snapshot import SnapshotBuilder

ATLAS = "/profile/wow/character/tarren-mill/atlas"
API = "https://eu.api.blizzard.com"


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self.body = body

    async def json(self, content_type=None):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.

    ``routes`` maps a URL path to ``(status, body)``, an exception to raise,
    or a callable taking the request headers and returning either.
    Unknown paths answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, headers=None, params=None, timeout=None):
        path = urlparse(url).path
        self.calls.append({"path": path, "headers": headers, "params": params})
        handler = self.routes.get(path, (404, {"code": 404}))
        if callable(handler):
            handler = handler(headers)
        if isinstance(handler, BaseException):
            raise handler
        status, body = handler
        return FakeResponse(status, body)

    def count(self, path):
        return sum(1 for c in self.calls if c["path"] == path)


def token_response(token):
    resp = MagicMock()
    resp.json.return_value = {"access_token": token, "token_type": "bearer"}
    return resp


def bracket_href(bracket_type):
    return f"{API}{ATLAS}/pvp-bracket/{bracket_type}?namespace=profile-eu"


def atlas_routes():
    """A mage with a Fire shuffle bracket plus 2v2 and 3v3."""
    return {
        ATLAS: (
            200,
            {
                "id": 1,
                "name": "Atlas",
                "realm": {"slug": "tarren-mill", "name": "Tarren Mill"},
                "character_class": {"id": 8, "name": "Mage"},
                "faction": {"type": "HORDE", "name": "Horde"},
                "level": 80,
            },
        ),
        f"{ATLAS}/character-media": (
            200,
            {
                "assets": [
                    {"key": "avatar", "value": "https://render.worldofwarcraft.com/atlas-avatar.jpg"},
                    {"key": "inset", "value": "https://render.worldofwarcraft.com/atlas-inset.jpg"},
                ]
            },
        ),
        f"{ATLAS}/pvp-summary": (
            200,
            {
                "honor_level": 50,
                "brackets": [
                    {"href": bracket_href("shuffle-mage-fire")},
                    {"href": bracket_href("2v2")},
                    {"href": bracket_href("3v3")},
                ],
            },
        ),
        f"{ATLAS}/pvp-bracket/shuffle-mage-fire": (
            200,
            {
                "rating": 2104,
                "season_match_statistics": {"played": 20, "won": 11, "lost": 9},
                "season_round_statistics": {"played": 120, "won": 66, "lost": 54},
            },
        ),
        f"{ATLAS}/pvp-bracket/2v2": (
            200,
            {
                "rating": 1850,
                "season_match_statistics": {"played": 40, "won": 25, "lost": 15},
            },
        ),
        f"{ATLAS}/pvp-bracket/3v3": (
            200,
            {
                "rating": 1700,
                "season_match_statistics": {"played": 10, "won": 7, "lost": 3},
            },
        ),
    }


def make_snapshot(identity, *brackets, display_name=None):
    return CharacterSnapshot(
        identity=identity,
        display_name=display_name or identity.name.title(),
        realm_slug=identity.realm_slug,
        class_name="Mage",
        faction_name="HORDE",
        avatar_url=None,
        brackets=tuple(BracketResult(t, r) for t, r in brackets),
    )


class FakeBuilder:
    """Serves snapshots from a dict keyed by identity key; missing keys raise NotFound."""

    def __init__(self, characters):
        self.characters = characters
        self.build = AsyncMock(side_effect=self._build)

    async def _build(self, identity):
        result = self.characters.get(identity.key)
        if result is None:
            raise NotFound(identity.key)
        if isinstance(result, Exception):
            raise result
        return make_snapshot(identity, *result)


@pytest.fixture
def settings():
    return Settings(region="eu", client_id="cid", client_secret="secret", request_timeout=2)


@pytest.fixture
def token_post():
    with patch("ratedstats_roster.auth.requests.post") as post:
        post.side_effect = [token_response(f"tok-{i}") for i in range(1, 10)]
        yield post


@pytest.fixture
def tokens(settings, token_post):
    return TokenManager(settings)


@pytest.fixture
def session():
    return FakeSession(atlas_routes())


@pytest.fixture
def fetcher(settings, session):
    return ResourceFetcher(settings, session, limiters=[])


@pytest.fixture
def builder(fetcher, tokens):
    return SnapshotBuilder(fetcher, tokens)
