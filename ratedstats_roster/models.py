"""
Record types for tracked characters and the four profile resources.

The ``*Resource`` classes are decode contracts: each ``from_json`` picks out
the fields we consume and ignores everything else, raising ``DecodeError``
when the payload is not the shape Blizzard documents.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from .errors import DecodeError


def realm_slug(server: str) -> str:
    """'Tarren Mill' -> 'tarren-mill', "Kel'Thuzad" -> 'kelthuzad'."""
    return "-".join(server.lower().replace("'", "").split())


@dataclass(frozen=True)
class CharacterIdentity:
    name: str
    server: str

    def __post_init__(self):
        # normalize in place; frozen dataclasses need object.__setattr__
        object.__setattr__(self, "name", self.name.strip().lower())
        object.__setattr__(self, "server", self.server.strip().lower())

    @property
    def key(self) -> str:
        return f"{self.name}-{self.server}"

    @property
    def realm_slug(self) -> str:
        return realm_slug(self.server)

    @property
    def path(self) -> str:
        """Base profile path for this character."""
        return f"/profile/wow/character/{quote(self.realm_slug)}/{quote(self.name)}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class Credential:
    token: str
    obtained_at: float = field(default_factory=time.time)

    def __repr__(self) -> str:
        return f"Credential(token=<redacted>, obtained_at={self.obtained_at})"


@dataclass(frozen=True)
class BracketStatistics:
    played: int = 0
    won: int = 0
    lost: int = 0

    @classmethod
    def from_json(cls, data: Any) -> "BracketStatistics":
        if not isinstance(data, dict):
            return cls()
        return cls(
            played=int(data.get("played") or 0),
            won=int(data.get("won") or 0),
            lost=int(data.get("lost") or 0),
        )


@dataclass(frozen=True)
class BracketResult:
    type: str
    rating: int = 0
    statistics: BracketStatistics = field(default_factory=BracketStatistics)

    @classmethod
    def sentinel(cls, bracket_type: str) -> "BracketResult":
        return cls(type=bracket_type)


@dataclass(frozen=True)
class CharacterSnapshot:
    identity: CharacterIdentity
    display_name: str
    realm_slug: str
    class_name: str | None
    faction_name: str | None
    avatar_url: str | None
    brackets: tuple[BracketResult, ...]


# --------------------------------------------------------------------------
# Decode contracts
# --------------------------------------------------------------------------
def _require_dict(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeError(f"{what}: expected a JSON object, got {type(data).__name__}")
    return data


def _name_of(data: dict, key: str) -> str | None:
    value = data.get(key)
    if isinstance(value, dict) and isinstance(value.get("name"), str):
        return value["name"]
    return None


@dataclass(frozen=True)
class ProfileResource:
    name: str
    realm_slug: str | None
    class_name: str | None
    faction_name: str | None

    @classmethod
    def from_json(cls, data: Any) -> "ProfileResource":
        data = _require_dict(data, "profile")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise DecodeError("profile: missing character name")
        realm = data.get("realm")
        slug = realm.get("slug") if isinstance(realm, dict) else None
        return cls(
            name=name,
            realm_slug=slug if isinstance(slug, str) and slug else None,
            class_name=_name_of(data, "character_class"),
            faction_name=_name_of(data, "faction"),
        )


@dataclass(frozen=True)
class MediaResource:
    assets: dict[str, str]

    @classmethod
    def from_json(cls, data: Any) -> "MediaResource":
        data = _require_dict(data, "character-media")
        entries = data.get("assets") or []
        if not isinstance(entries, list):
            raise DecodeError("character-media: 'assets' is not a list")
        assets = {}
        for asset in entries:
            if not isinstance(asset, dict):
                continue
            key, value = asset.get("key"), asset.get("value")
            if isinstance(key, str) and isinstance(value, str):
                assets.setdefault(key, value)
        return cls(assets=assets)

    @property
    def avatar(self) -> str | None:
        return self.assets.get("avatar")


@dataclass(frozen=True)
class PvpSummaryResource:
    bracket_refs: tuple[str, ...]

    @classmethod
    def from_json(cls, data: Any) -> "PvpSummaryResource":
        data = _require_dict(data, "pvp-summary")
        brackets = data.get("brackets") or []
        if not isinstance(brackets, list):
            raise DecodeError("pvp-summary: 'brackets' is not a list")
        refs = []
        for entry in brackets:
            href = None
            if isinstance(entry, dict):
                href = entry.get("href")
                key = entry.get("key")
                if not href and isinstance(key, dict):
                    href = key.get("href")
            if not isinstance(href, str) or not href:
                raise DecodeError(f"pvp-summary: bracket entry without href: {entry!r}")
            refs.append(href)
        return cls(bracket_refs=tuple(refs))


@dataclass(frozen=True)
class BracketDetailResource:
    rating: int
    match_statistics: BracketStatistics
    round_statistics: BracketStatistics

    @classmethod
    def from_json(cls, data: Any) -> "BracketDetailResource":
        data = _require_dict(data, "pvp-bracket")
        try:
            return cls(
                rating=int(data.get("rating") or 0),
                match_statistics=BracketStatistics.from_json(
                    data.get("season_match_statistics")
                ),
                round_statistics=BracketStatistics.from_json(
                    data.get("season_round_statistics")
                ),
            )
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"pvp-bracket: non-numeric field ({exc})") from exc
