"""
Bracket discovery and per-bracket fan-out.

A character's pvp-summary lists its brackets only by reference, e.g.::

    https://eu.api.blizzard.com/profile/wow/character/tarren-mill/atlas/pvp-bracket/shuffle-mage-fire?namespace=profile-eu

Each reference is reduced to its bracket token (``shuffle-mage-fire``) and
the bracket's detail is fetched on its own. A bracket that cannot be fetched
or decoded is reported as a zero-valued sentinel, so the result always has
one entry per bracket the summary listed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from urllib.parse import urlparse

from .errors import ArmoryError
from .models import (
    BracketDetailResource,
    BracketResult,
    BracketStatistics,
    PvpSummaryResource,
)

log = logging.getLogger(__name__)

# Solo Shuffle is scored per round (six rounds per match), every other
# bracket per match.
INDIVIDUAL_ROUND_MARKER = "shuffle"
TEAM_BRACKETS = ("2v2", "3v3")

FetchDetail = Callable[[str], Awaitable[Any]]


def extract_bracket_type(reference: str) -> str:
    """
    Return the bracket token at the end of a pvp-bracket reference.

    >>> extract_bracket_type(".../pvp-bracket/3v3?namespace=profile-eu")
    '3v3'
    >>> extract_bracket_type(".../pvp-bracket/shuffle-mage-fire/")
    'shuffle-mage-fire'
    >>> extract_bracket_type("2v2")
    '2v2'
    """
    path = urlparse(reference).path
    return path.rstrip("/").split("/")[-1]


def is_individual_round(bracket_type: str) -> bool:
    return INDIVIDUAL_ROUND_MARKER in bracket_type


def select_statistics(bracket_type: str, detail: BracketDetailResource) -> BracketStatistics:
    """Round stats for Solo Shuffle, match stats for everything else."""
    if is_individual_round(bracket_type):
        return detail.round_statistics
    return detail.match_statistics


def classify_bracket(bracket_type: str, detail: BracketDetailResource) -> BracketResult:
    return BracketResult(
        type=bracket_type,
        rating=detail.rating,
        statistics=select_statistics(bracket_type, detail),
    )


async def _fetch_bracket(bracket_type: str, fetch_detail: FetchDetail) -> BracketResult:
    try:
        payload = await fetch_detail(bracket_type)
        detail = BracketDetailResource.from_json(payload)
    except ArmoryError as exc:
        log.warning("[BRACKET] %s unavailable, using zero entry: %s", bracket_type, exc)
        return BracketResult.sentinel(bracket_type)
    return classify_bracket(bracket_type, detail)


async def aggregate_brackets(
    summary: PvpSummaryResource, fetch_detail: FetchDetail
) -> list[BracketResult]:
    """Fetch every bracket in ``summary`` concurrently.

    ``fetch_detail`` takes a bracket token and returns the raw pvp-bracket
    payload. The returned list has exactly one entry per reference in the
    summary; no ordering is promised.
    """
    types = [extract_bracket_type(ref) for ref in summary.bracket_refs]
    if not types:
        return []
    log.debug("[BRACKET] Fetching %d brackets: %s", len(types), ", ".join(types))
    results = await asyncio.gather(*(_fetch_bracket(t, fetch_detail) for t in types))
    return list(results)
