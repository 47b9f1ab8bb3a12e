from __future__ import annotations

import asyncio
import logging
from typing import Any

from .auth import TokenManager
from .brackets import aggregate_brackets
from .errors import ArmoryError, AuthError, AuthRejected
from .fetcher import ResourceFetcher
from .models import (
    CharacterIdentity,
    CharacterSnapshot,
    MediaResource,
    ProfileResource,
    PvpSummaryResource,
)

log = logging.getLogger(__name__)


class SnapshotBuilder:
    """
    Builds one CharacterSnapshot from the profile, media, pvp-summary and
    pvp-bracket resources.

    Every request goes through ``_get``: if the token is rejected, the
    cached token is invalidated and the request is sent once more with a
    fresh one. A second rejection is raised as ``AuthError``.

    Profile and pvp-summary failures abort the build. A missing avatar or a
    failed media request only leaves ``avatar_url`` empty, and failed
    brackets become zero entries.
    """

    def __init__(self, fetcher: ResourceFetcher, tokens: TokenManager):
        self.fetcher = fetcher
        self.tokens = tokens

    async def _get(self, path: str) -> Any:
        token = await self.tokens.get_token()
        try:
            return await self.fetcher.fetch(path, token)
        except AuthRejected:
            log.info("[AUTH] Token rejected for %s, refreshing and retrying once", path)
            self.tokens.invalidate(token)

        token = await self.tokens.get_token()
        try:
            return await self.fetcher.fetch(path, token)
        except AuthRejected as exc:
            raise AuthError(f"token rejected twice for {path}") from exc

    async def _avatar(self, identity: CharacterIdentity) -> str | None:
        try:
            media = MediaResource.from_json(await self._get(f"{identity.path}/character-media"))
        except AuthError:
            raise
        except ArmoryError as exc:
            log.warning("[FETCH] No media for %s: %s", identity, exc)
            return None
        return media.avatar

    async def _summary(self, identity: CharacterIdentity) -> PvpSummaryResource:
        return PvpSummaryResource.from_json(await self._get(f"{identity.path}/pvp-summary"))

    async def build(self, identity: CharacterIdentity) -> CharacterSnapshot:
        profile = ProfileResource.from_json(await self._get(identity.path))

        # media runs alongside the summary and must not outlive a failed build
        avatar_task = asyncio.create_task(self._avatar(identity))
        try:
            summary = await self._summary(identity)
        except BaseException:
            avatar_task.cancel()
            raise
        avatar = await avatar_task

        async def fetch_detail(bracket_type: str) -> Any:
            return await self._get(f"{identity.path}/pvp-bracket/{bracket_type}")

        brackets = await aggregate_brackets(summary, fetch_detail)

        log.info(
            "[FETCH] %s: %s (%s), %d brackets",
            identity,
            profile.name,
            profile.class_name or "unknown class",
            len(brackets),
        )
        return CharacterSnapshot(
            identity=identity,
            display_name=profile.name,
            realm_slug=profile.realm_slug or identity.realm_slug,
            class_name=profile.class_name,
            faction_name=profile.faction_name.upper() if profile.faction_name else None,
            avatar_url=avatar,
            brackets=tuple(brackets),
        )
