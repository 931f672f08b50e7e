from __future__ import annotations

import hashlib
from collections.abc import Iterable

from hunt_summary.core.text import normalize_player_name
from hunt_summary.match.models import PlayerRecord


def _digest(rows: Iterable[tuple[object, ...]]) -> str:
    h = hashlib.sha256()
    for row in sorted(rows):
        h.update("\x1f".join(str(v) for v in row).encode("utf-8"))
        h.update(b"\x1e")
    return h.hexdigest()


def compute_fingerprint(players: Iterable[PlayerRecord]) -> str:
    """Stable hash over sorted (team, player, mmr, kills) tuples.

    Independent of document byte layout and key order, so a cosmetic rewrite of
    the same match yields the same fingerprint.
    """
    return _digest((p.team_index, p.player_index, p.mmr, p.kills) for p in players)


def compute_roster_key(players: Iterable[PlayerRecord]) -> str:
    return _digest(
        (p.team_index, p.player_index, p.profile_id, normalize_player_name(p.display_name))
        for p in players
    )
