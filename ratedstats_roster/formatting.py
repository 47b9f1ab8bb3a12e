"""Display helpers for ranked roster output."""

from __future__ import annotations

from .brackets import TEAM_BRACKETS, is_individual_round
from .models import BracketResult, BracketStatistics, CharacterSnapshot


def win_rate(stats: BracketStatistics) -> str:
    if not stats.played:
        return "0.0"
    return f"{stats.won / stats.played * 100:.1f}"


def format_stats(stats: BracketStatistics | None) -> str:
    if stats is None:
        return "No stats available"
    return f"Wins: {stats.won} | Losses: {stats.lost} | Win Rate: {win_rate(stats)}%"


def spec_label(bracket_type: str) -> str:
    """'shuffle-mage-fire' -> 'Fire', 'shuffle-deathknight-frost' -> 'Frost'."""
    parts = bracket_type.split("-")
    spec = parts[-1] if len(parts) > 1 else bracket_type
    return spec[:1].upper() + spec[1:]


def individual_brackets(snapshot: CharacterSnapshot) -> list[BracketResult]:
    brackets = [b for b in snapshot.brackets if is_individual_round(b.type)]
    return sorted(brackets, key=lambda b: b.rating, reverse=True)


def format_solo_ratings(brackets: list[BracketResult]) -> str:
    if not brackets:
        return "0"
    return " | ".join(f"{spec_label(b.type)}: {b.rating}" for b in brackets)


def find_bracket(snapshot: CharacterSnapshot, bracket_type: str) -> BracketResult | None:
    return next((b for b in snapshot.brackets if b.type == bracket_type), None)


def bracket_rating(snapshot: CharacterSnapshot, bracket_type: str) -> int:
    bracket = find_bracket(snapshot, bracket_type)
    return bracket.rating if bracket else 0


TABLE_HEADERS = ["#", "Character", "Class", "Solo Ratings", *(f"{t} Rating" for t in TEAM_BRACKETS)]


def ranked_rows(snapshots: list[CharacterSnapshot]) -> list[list[str]]:
    rows = []
    for rank, snap in enumerate(snapshots, start=1):
        rows.append(
            [
                f"#{rank}",
                snap.display_name,
                snap.class_name or "Unknown",
                format_solo_ratings(individual_brackets(snap)),
                *(str(bracket_rating(snap, t)) for t in TEAM_BRACKETS),
            ]
        )
    return rows


def render_table(rows: list[list[str]], headers: list[str] = TABLE_HEADERS) -> str:
    col_widths = [
        max(len(h), *(len(row[i]) for row in rows)) if rows else len(h)
        for i, h in enumerate(headers)
    ]

    def _fmt_row(row: list[str]) -> str:
        return "  ".join(cell.ljust(col_widths[i]) for i, cell in enumerate(row)).rstrip()

    return "\n".join([_fmt_row(headers), *(_fmt_row(r) for r in rows)])
