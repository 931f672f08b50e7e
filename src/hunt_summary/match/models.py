from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PlayerRecord:
    # Zero-based; renumbering happens only when a table is written.
    team_index: int
    player_index: int

    display_name: str = ""
    mmr: int = 0
    profile_id: str = ""

    kills: int = 0
    deaths: int = 0
    assists: int = 0

    survived: bool = False
    is_own_team: bool = False

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.team_index, self.player_index)


@dataclass(frozen=True)
class MatchSummary:
    """One extracted match: who played, their stats, and content identities."""
    match_timestamp: datetime
    players: tuple[PlayerRecord, ...]

    # Content hash over (team, player, mmr, kills); equal for rewrites of the same result.
    source_fingerprint: str
    # Hash over who took part; equal for in-place corrections of the same match.
    roster_key: str

    def __post_init__(self) -> None:
        if not self.players:
            raise ValueError("MatchSummary requires at least one player.")

    @property
    def num_teams(self) -> int:
        return len({p.team_index for p in self.players})

    @property
    def own_team(self) -> tuple[PlayerRecord, ...]:
        return tuple(p for p in self.players if p.is_own_team)
