from __future__ import annotations

import logging

import aiohttp

from .auth import TokenManager
from .config import Settings
from .fetcher import ResourceFetcher
from .roster import Roster
from .snapshot import SnapshotBuilder

log = logging.getLogger(__name__)


class ArmoryClient:
    """
    Process-lifetime wiring: one HTTP session, one token, one builder.

        async with ArmoryClient(Settings.from_env()) as client:
            roster = client.new_roster()
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.tokens = TokenManager(settings)
        self.session: aiohttp.ClientSession | None = None
        self.fetcher: ResourceFetcher | None = None
        self.builder: SnapshotBuilder | None = None

    async def __aenter__(self) -> "ArmoryClient":
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)
        self.fetcher = ResourceFetcher(self.settings, self.session)
        self.builder = SnapshotBuilder(self.fetcher, self.tokens)
        return self

    async def __aexit__(self, *exc_info):
        if self.fetcher is not None:
            log.debug("[FETCH] Request metrics: %s", self.fetcher.metrics)
        if self.session is not None:
            await self.session.close()
        self.session = None

    def new_roster(self) -> Roster:
        if self.builder is None:
            raise RuntimeError("ArmoryClient must be entered with 'async with' first")
        return Roster(self.builder)
