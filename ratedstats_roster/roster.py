from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass

from .brackets import is_individual_round
from .errors import ArmoryError
from .models import CharacterIdentity, CharacterSnapshot
from .snapshot import SnapshotBuilder

log = logging.getLogger(__name__)

# rank value for characters with no Solo Shuffle bracket at all; below any
# real rating, including 0
NO_RATING = -1


def best_individual_rating(snapshot: CharacterSnapshot) -> int:
    ratings = [b.rating for b in snapshot.brackets if is_individual_round(b.type)]
    return max(ratings, default=NO_RATING)


@dataclass
class _Entry:
    seq: int
    snapshot: CharacterSnapshot


class Roster:
    """
    The tracked characters, keyed by ``name-server``.

    Ranking is by best Solo Shuffle rating, high to low. Equal ratings keep
    the order the characters were added in, including across refreshes.
    Inserts and replacements happen under one lock; snapshots are built
    outside it, with in-flight keys tracked so a concurrent duplicate add
    is still rejected.
    """

    def __init__(self, builder: SnapshotBuilder):
        self.builder = builder
        self._entries: dict[str, _Entry] = {}
        self._pending: set[str] = set()
        self._seq = itertools.count()
        self._lock = asyncio.Lock()
        self.last_error: str | None = None
        self.errors: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, CharacterIdentity):
            key = key.key
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> CharacterSnapshot | None:
        entry = self._entries.get(key)
        return entry.snapshot if entry else None

    async def add(self, identity: CharacterIdentity) -> bool:
        """Fetch and insert ``identity``.

        Returns False, leaving the roster untouched, if the character is
        already tracked or could not be built; in the latter case
        ``errors[key]`` holds a message fit for the user. ``last_error``
        mirrors the most recent failure, which is only meaningful to a
        caller that awaits one add at a time.
        """
        identity = CharacterIdentity(identity.name, identity.server)
        key = identity.key
        async with self._lock:
            self.last_error = None
            if key in self._entries or key in self._pending:
                log.debug("[ROSTER] %s already tracked", identity)
                return False
            self._pending.add(key)
        try:
            snapshot = await self.builder.build(identity)
        except ArmoryError as exc:
            self.last_error = exc.user_message(identity.name, identity.server)
            self.errors[identity.key] = self.last_error
            log.warning("[ROSTER] Could not add %s: %s", identity, exc)
            return False
        finally:
            self._pending.discard(key)
        async with self._lock:
            self._entries[key] = _Entry(next(self._seq), snapshot)
            self.errors.pop(key, None)
        log.info("[ROSTER] Added %s", identity)
        return True

    def remove(self, key: str) -> None:
        if self._entries.pop(key.strip().lower(), None) is not None:
            log.info("[ROSTER] Removed %s", key)

    async def refresh(self, key: str) -> bool:
        """Rebuild one character; on failure keep the previous snapshot."""
        key = key.strip().lower()
        entry = self._entries.get(key)
        if entry is None:
            return False
        identity = entry.snapshot.identity
        try:
            snapshot = await self.builder.build(identity)
        except ArmoryError as exc:
            self.last_error = exc.user_message(identity.name, identity.server)
            self.errors[identity.key] = self.last_error
            log.warning("[ROSTER] Refresh of %s failed, keeping previous data: %s", key, exc)
            return False
        async with self._lock:
            # removed while we were fetching
            if key not in self._entries:
                return False
            self._entries[key] = _Entry(entry.seq, snapshot)
        return True

    def ranked_view(self) -> list[CharacterSnapshot]:
        entries = sorted(
            self._entries.values(),
            key=lambda e: (-best_individual_rating(e.snapshot), e.seq),
        )
        return [e.snapshot for e in entries]
