"""Track a roster of characters and rank them by rated PvP, via the Blizzard profile API."""

from .auth import TokenManager
from .brackets import aggregate_brackets, extract_bracket_type, is_individual_round
from .client import ArmoryClient
from .config import Settings
from .errors import (
    ArmoryError,
    AuthError,
    AuthRejected,
    DecodeError,
    NetworkError,
    NotFound,
)
from .fetcher import ResourceFetcher
from .formatting import win_rate
from .loader import LoadReport, load_roster, load_seed_file, parse_seed_list
from .models import BracketResult, BracketStatistics, CharacterIdentity, CharacterSnapshot
from .roster import Roster
from .snapshot import SnapshotBuilder

__all__ = [
    "ArmoryClient",
    "ArmoryError",
    "AuthError",
    "AuthRejected",
    "BracketResult",
    "BracketStatistics",
    "CharacterIdentity",
    "CharacterSnapshot",
    "DecodeError",
    "LoadReport",
    "NetworkError",
    "NotFound",
    "ResourceFetcher",
    "Roster",
    "Settings",
    "SnapshotBuilder",
    "TokenManager",
    "aggregate_brackets",
    "extract_bracket_type",
    "is_individual_round",
    "load_roster",
    "load_seed_file",
    "parse_seed_list",
    "win_rate",
]
