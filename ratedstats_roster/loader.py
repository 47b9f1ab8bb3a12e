"""
Seed list loading.

The seed file holds one ``name,server`` per line; blank lines and ``#``
comments are ignored and everything is case-insensitive::

    # friends
    Atlas, Tarren Mill
    atlas,tarren mill      <- same character, loaded once
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .models import CharacterIdentity
from .roster import Roster

log = logging.getLogger(__name__)


@dataclass
class LoadReport:
    loaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # already tracked
    failed: dict[str, str] = field(default_factory=dict)  # key -> message
    error: str | None = None  # the seed list itself could not be read


def parse_seed_list(text: str) -> list[CharacterIdentity]:
    seen: set[str] = set()
    identities: list[CharacterIdentity] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        name, sep, server = line.partition(",")
        if not sep or not name.strip() or not server.strip():
            log.warning("[LOAD] Line %d: expected 'name,server', got %r", lineno, line)
            continue
        identity = CharacterIdentity(name, server)
        if identity.key in seen:
            continue
        seen.add(identity.key)
        identities.append(identity)
    return identities


async def load_roster(
    roster: Roster, identities: list[CharacterIdentity], workers: int = 1
) -> LoadReport:
    """Add every identity to ``roster``; one failure never stops the rest.

    With ``workers > 1`` up to that many characters are built at once.
    """
    report = LoadReport()
    sem = asyncio.Semaphore(max(1, workers))

    async def load_one(identity: CharacterIdentity):
        async with sem:
            if identity in roster:
                report.skipped.append(identity.key)
                return
            try:
                added = await roster.add(identity)
            except Exception as exc:
                log.exception("[LOAD] Unexpected error loading %s", identity)
                report.failed[identity.key] = f"{type(exc).__name__}: {exc}"
                return
            if added:
                report.loaded.append(identity.key)
            elif identity in roster:
                report.skipped.append(identity.key)
            else:
                report.failed[identity.key] = roster.errors.get(identity.key, "unknown error")
                log.error("[LOAD] Error loading %s: %s", identity, report.failed[identity.key])

    if workers <= 1:
        for identity in identities:
            await load_one(identity)
    else:
        await asyncio.gather(*(load_one(i) for i in identities))

    log.info(
        "[LOAD] %d loaded, %d already tracked, %d failed",
        len(report.loaded),
        len(report.skipped),
        len(report.failed),
    )
    return report


async def load_seed_file(roster: Roster, path: Path, workers: int = 1) -> LoadReport:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.error("[LOAD] Failed to load tracked characters from %s: %s", path, exc)
        return LoadReport(error=f"Failed to load tracked characters: {exc}")
    return await load_roster(roster, parse_seed_list(text), workers=workers)
