from __future__ import annotations

import asyncio
import logging

import requests

from .config import Settings
from .errors import AuthError
from .models import Credential

log = logging.getLogger(__name__)


class TokenManager:
    """
    Holds the one live client-credentials token for the process.

    The token is fetched lazily and trusted until a caller reports it was
    rejected (``invalidate``). Reads are lock-free; refreshes go through a
    single lock so callers that all saw the same rejection share one
    exchange instead of each hitting the token endpoint. Callers queued
    behind a failed exchange get its ``AuthError``; the next caller to
    arrive tries again.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._credential: Credential | None = None
        self._lock = asyncio.Lock()
        self.exchanges = 0
        self._failures = 0
        self._last_failure = ""

    @property
    def credential(self) -> Credential | None:
        return self._credential

    async def get_token(self) -> str:
        cred = self._credential
        if cred is not None:
            return cred.token
        failures = self._failures
        async with self._lock:
            # another caller may have refreshed while we waited
            if self._credential is not None:
                return self._credential.token
            # or failed to; share that failure rather than retrying it
            if self._failures != failures:
                raise AuthError(self._last_failure)
            try:
                self._credential = await asyncio.to_thread(self._exchange)
            except AuthError as exc:
                self._failures += 1
                self._last_failure = str(exc)
                raise
            return self._credential.token

    def invalidate(self, token: str | None = None) -> None:
        """Drop the cached token.

        With ``token`` given, only drop it if it is still the cached one, so
        a late report about an already-replaced token does not throw away
        the fresh one.
        """
        cred = self._credential
        if cred is None:
            return
        if token is not None and cred.token != token:
            return
        log.info("[AUTH] Cached token invalidated")
        self._credential = None

    def _exchange(self) -> Credential:
        cid = self.settings.client_id
        cs = self.settings.client_secret
        if not cid or not cs:
            raise AuthError(
                "missing credentials (set BLIZZARD_CLIENT_ID / BLIZZARD_CLIENT_SECRET)"
            )

        log.info("[AUTH] Requesting access token for region %s", self.settings.region)
        self.exchanges += 1
        try:
            resp = requests.post(
                self.settings.token_url,
                data={"grant_type": "client_credentials"},
                auth=(cid, cs),
                timeout=self.settings.request_timeout,
            )
            resp.raise_for_status()
            body = resp.json()
            token = body.get("access_token") if isinstance(body, dict) else None
        except requests.HTTPError as exc:
            detail = exc.response.text if exc.response is not None else ""
            raise AuthError(f"token endpoint returned an error: {exc} {detail}".strip()) from exc
        except (requests.RequestException, ValueError) as exc:
            raise AuthError(str(exc)) from exc

        if not token:
            raise AuthError("token response did not contain access_token")
        log.info("[AUTH] Access token received")
        return Credential(token=token)
