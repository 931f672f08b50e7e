from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from hunt_summary.attributes.types import RawAttributeMap
from hunt_summary.core.errors import IncompleteMatchData, NoPlayersFound
from hunt_summary.core.text import parse_bool_text, parse_int_text
from hunt_summary.match.fields import (
    NUM_TEAMS_KEY,
    PLAYER_FIELDS,
    PLAYER_INDEX_SUFFIXES,
    PLAYER_PREFIX,
    TEAM_INDEX_SUFFIXES,
    TEAM_NUM_PLAYERS_SUFFIX,
    TEAM_OWN_TEAM_SUFFIX,
    TEAM_PREFIX,
    FieldSpec,
)
from hunt_summary.match.fingerprint import compute_fingerprint, compute_roster_key
from hunt_summary.match.models import MatchSummary, PlayerRecord

logger = logging.getLogger(__name__)

_bracket_index_re = re.compile(r"\[(\d+)\]")
# MissionBagPlayer_<team>_<player>_<suffix>
_indexed_player_re = re.compile(rf"^{PLAYER_PREFIX}[._](\d+)[._](\d+)[._](.+)$")
# MissionBagPlayer.<slot>.<suffix>, indices carried as values
_slot_player_re = re.compile(rf"^{PLAYER_PREFIX}[._](\d+)[._]([A-Za-z].*)$")
# MissionBagTeam_<team>_<suffix>
_team_re = re.compile(rf"^{TEAM_PREFIX}[._](\d+)[._](.+)$")


def normalize_key(key: str) -> str:
    """`MissionBagPlayer[0].mmr` -> `MissionBagPlayer.0.mmr`"""
    return _bracket_index_re.sub(r".\1", key.strip())


@dataclass
class _PlayerGroup:
    # ("indexed", team, player) or ("slot", slot)
    key: tuple[Any, ...]
    team_index: int | None = None
    player_index: int | None = None
    values: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return all(v.strip() == "" for v in self.values.values())

    def context(self) -> dict[str, object]:
        return {"group": self.key, "suffixes": sorted(self.values)}


@dataclass
class _KeySpace:
    players: dict[tuple[Any, ...], _PlayerGroup] = field(default_factory=dict)
    teams: dict[int, dict[str, str]] = field(default_factory=dict)


def _scan_keys(attrs: RawAttributeMap) -> _KeySpace:
    space = _KeySpace()

    for raw_key, value in attrs.items():
        key = normalize_key(raw_key)

        m = _indexed_player_re.match(key)
        if m:
            team, player, suffix = int(m.group(1)), int(m.group(2)), m.group(3).lower()
            gkey: tuple[Any, ...] = ("indexed", team, player)
            group = space.players.get(gkey)
            if group is None:
                group = space.players[gkey] = _PlayerGroup(gkey, team, player)
            group.values[suffix] = value
            continue

        m = _slot_player_re.match(key)
        if m:
            slot, suffix = int(m.group(1)), m.group(2).lower()
            gkey = ("slot", slot)
            group = space.players.get(gkey)
            if group is None:
                group = space.players[gkey] = _PlayerGroup(gkey)
            group.values[suffix] = value
            continue

        m = _team_re.match(key)
        if m:
            space.teams.setdefault(int(m.group(1)), {})[m.group(2).lower()] = value

    return space


def _first_present(values: dict[str, str], suffixes: tuple[str, ...]) -> str | None:
    for suffix in suffixes:
        raw = values.get(suffix)
        if raw is not None and raw.strip() != "":
            return raw
    return None


def _parse_index(group: _PlayerGroup, raw: str | None, *, what: str) -> int:
    if raw is None:
        raise IncompleteMatchData(f"Player entry has no {what}", group.context())
    try:
        idx = parse_int_text(raw)
    except ValueError as e:
        raise IncompleteMatchData(f"Unreadable {what} {raw!r}", group.context()) from e
    if idx < 0:
        raise IncompleteMatchData(f"Negative {what} {idx}", group.context())
    return idx


def _resolve_indices(group: _PlayerGroup) -> tuple[int, int]:
    if group.team_index is not None and group.player_index is not None:
        return group.team_index, group.player_index

    team = _parse_index(
        group, _first_present(group.values, TEAM_INDEX_SUFFIXES), what="team index"
    )
    player = _parse_index(
        group, _first_present(group.values, PLAYER_INDEX_SUFFIXES), what="player index"
    )
    return team, player


def _parse_num_teams(attrs: RawAttributeMap) -> int | None:
    raw = attrs.get(NUM_TEAMS_KEY)
    if raw is None or raw.strip() == "":
        return None
    try:
        return parse_int_text(raw)
    except ValueError as e:
        raise IncompleteMatchData(
            f"Unreadable {NUM_TEAMS_KEY} {raw!r}", {"key": NUM_TEAMS_KEY}
        ) from e


def _team_int(team_values: dict[str, str], suffix: str) -> int | None:
    raw = team_values.get(suffix)
    if raw is None or raw.strip() == "":
        return None
    try:
        return parse_int_text(raw)
    except ValueError:
        return None


def _team_flag(team_values: dict[str, str], suffix: str) -> bool | None:
    raw = team_values.get(suffix)
    if raw is None or raw.strip() == "":
        return None
    try:
        return parse_bool_text(raw)
    except ValueError:
        return None


def _resolve_field(spec: FieldSpec, group: _PlayerGroup) -> Any:
    raw = spec.lookup(group.values)
    if raw is None:
        if spec.required:
            raise IncompleteMatchData(f"Player entry is missing {spec.field}", group.context())
        return spec.default
    try:
        return spec.parse(raw)
    except ValueError as e:
        raise IncompleteMatchData(
            f"Unreadable {spec.field} {raw!r}", group.context()
        ) from e


def _build_player(
    group: _PlayerGroup,
    team: int,
    player: int,
    team_values: dict[str, str],
) -> PlayerRecord:
    if not any(spec.lookup(group.values) is not None for spec in PLAYER_FIELDS if spec.identity):
        raise IncompleteMatchData("Player entry has no identity field", group.context())

    resolved = {spec.field: _resolve_field(spec, group) for spec in PLAYER_FIELDS}

    if resolved["is_own_team"] is None:
        resolved["is_own_team"] = bool(_team_flag(team_values, TEAM_OWN_TEAM_SUFFIX))

    return PlayerRecord(team_index=team, player_index=player, **resolved)


def extract_players(attrs: RawAttributeMap) -> list[PlayerRecord]:
    """
    Walk the flat key space and build one PlayerRecord per occupied (team, player) slot.

    Rules:
    - Teams at or beyond `MissionBagNumTeams` (when present) are leftovers from
      earlier matches and are ignored, as are players beyond a team's `numplayers`.
    - Groups whose values are all empty are unused slots.
    - Any occupied slot that lacks indices, identity or MMR fails the whole match.

    Returned players are sorted by (team_index, player_index).
    """
    space = _scan_keys(attrs)
    num_teams = _parse_num_teams(attrs)

    by_slot: dict[tuple[int, int], PlayerRecord] = {}

    for group in space.players.values():
        if group.is_empty():
            continue

        team, player = _resolve_indices(group)

        if num_teams is not None and team >= num_teams:
            continue

        team_values = space.teams.get(team, {})
        team_size = _team_int(team_values, TEAM_NUM_PLAYERS_SUFFIX)
        if team_size is not None and player >= team_size:
            continue

        record = _build_player(group, team, player, team_values)

        if (team, player) in by_slot:
            raise IncompleteMatchData(
                "Conflicting entries for the same player slot",
                {"team": team, "player": player},
            )
        by_slot[(team, player)] = record

    return sorted(by_slot.values(), key=lambda p: p.sort_key)


def extract_match_summary(attrs: RawAttributeMap, *, match_timestamp: datetime) -> MatchSummary:
    players = extract_players(attrs)
    if not players:
        raise NoPlayersFound("Attribute document holds no occupied player slots.")

    logger.debug(
        "Extracted %d players across %d teams",
        len(players),
        len({p.team_index for p in players}),
    )

    return MatchSummary(
        match_timestamp=match_timestamp,
        players=tuple(players),
        source_fingerprint=compute_fingerprint(players),
        roster_key=compute_roster_key(players),
    )
