from __future__ import annotations

import random
from datetime import UTC, datetime

import pytest

from helpers import player_entries, sample_match_entries
from hunt_summary.core.errors import IncompleteMatchData, NoPlayersFound
from hunt_summary.match.extractor import extract_match_summary, extract_players, normalize_key
from hunt_summary.match.models import PlayerRecord

TS = datetime(2026, 10, 18, 20, 15, tzinfo=UTC)


def _as_text(entries: dict[str, object]) -> dict[str, str]:
    return {k: str(v) for k, v in entries.items()}


def test_slot_shaped_keys_resolve_indices_from_values() -> None:
    attrs = {
        "MissionBagPlayer.0.teamindex": "0",
        "MissionBagPlayer.0.index": "0",
        "MissionBagPlayer.0.mmr": "2500",
        "MissionBagPlayer.0.kills": "1",
    }

    summary = extract_match_summary(attrs, match_timestamp=TS)

    assert summary.players == (PlayerRecord(team_index=0, player_index=0, mmr=2500, kills=1),)
    assert summary.match_timestamp == TS


def test_bracketed_keys_are_normalized() -> None:
    assert normalize_key("MissionBagPlayer[3].mmr") == "MissionBagPlayer.3.mmr"

    attrs = {
        "MissionBagPlayer[1].teamindex": "2",
        "MissionBagPlayer[1].index": "1",
        "MissionBagPlayer[1].mmr": "1800",
        "MissionBagPlayer[1].name": "Bracket",
    }

    (player,) = extract_players(attrs)

    assert (player.team_index, player.player_index) == (2, 1)
    assert player.display_name == "Bracket"


def test_indexed_keys_produce_sorted_players_with_known_fields() -> None:
    players = extract_players(_as_text(sample_match_entries()))

    assert [(p.team_index, p.player_index) for p in players] == [(0, 0), (1, 0), (1, 1)]

    solo, duo_one, duo_two = players
    assert solo.display_name == "Solo Hunter"
    assert solo.profile_id == "111"
    assert solo.mmr == 2650
    assert solo.kills == 2
    assert solo.is_own_team is True
    assert solo.survived is False

    assert duo_one.is_own_team is False
    assert duo_two.deaths == 1
    assert duo_two.assists == 0


def test_kill_counts_are_read_from_the_listed_players_side() -> None:
    attrs = {
        "MissionBagNumTeams": "1",
        "MissionBagPlayer_0_0_blood_line_name": "Enemy",
        "MissionBagPlayer_0_0_mmr": "2400",
        # Enemy killed the local user twice and was never killed back.
        "MissionBagPlayer_0_0_killedme": "2",
        "MissionBagPlayer_0_0_killedbyme": "0",
    }

    (enemy,) = extract_players(attrs)

    assert enemy.kills == 2
    assert enemy.deaths == 0


def test_player_count_and_order_do_not_depend_on_key_order() -> None:
    items = list(_as_text(sample_match_entries()).items())
    expected = extract_players(dict(items))

    rng = random.Random(7)
    for _ in range(5):
        rng.shuffle(items)
        assert extract_players(dict(items)) == expected


def test_teams_beyond_num_teams_and_players_beyond_team_size_are_ignored() -> None:
    entries = sample_match_entries()
    # Leftover third player of team 1 from an earlier trio match.
    entries.update(player_entries(1, 2, name="Stale", mmr=4000, profile_id="444"))

    players = extract_players(_as_text(entries))

    assert {p.display_name for p in players} == {"Solo Hunter", "Duo One", "Duo Two"}


def test_empty_slots_are_skipped() -> None:
    attrs = {
        "MissionBagPlayer_0_0_mmr": "2500",
        "MissionBagPlayer_0_0_blood_line_name": "Alive",
        "MissionBagPlayer_0_1_mmr": "",
        "MissionBagPlayer_0_1_blood_line_name": "",
    }

    players = extract_players(attrs)

    assert [p.display_name for p in players] == ["Alive"]


def test_missing_mmr_fails_the_whole_match() -> None:
    entries = sample_match_entries()
    del entries["MissionBagPlayer_1_1_mmr"]

    with pytest.raises(IncompleteMatchData) as exc_info:
        extract_match_summary(_as_text(entries), match_timestamp=TS)

    assert "mmr" in str(exc_info.value)
    assert exc_info.value.context is not None
    assert exc_info.value.context["group"] == ("indexed", 1, 1)


def test_unreadable_mmr_is_incomplete_data() -> None:
    attrs = {"MissionBagPlayer_0_0_mmr": "25o0", "MissionBagPlayer_0_0_blood_line_name": "X"}

    with pytest.raises(IncompleteMatchData):
        extract_players(attrs)


def test_slot_without_indices_is_incomplete_data() -> None:
    attrs = {"MissionBagPlayer.0.mmr": "2500", "MissionBagPlayer.0.name": "Nobody"}

    with pytest.raises(IncompleteMatchData):
        extract_players(attrs)


def test_slot_without_identity_field_is_incomplete_data() -> None:
    attrs = {
        "MissionBagPlayer.0.teamindex": "0",
        "MissionBagPlayer.0.index": "0",
        "MissionBagPlayer.0.kills": "3",
    }

    with pytest.raises(IncompleteMatchData):
        extract_players(attrs)


def test_no_player_keys_raises_no_players_found() -> None:
    attrs = {"MissionBagNumTeams": "0", "UIMenuLastVisited": "lobby"}

    with pytest.raises(NoPlayersFound):
        extract_match_summary(attrs, match_timestamp=TS)


def test_integral_floats_and_unknown_suffixes_are_tolerated() -> None:
    attrs = {
        "MissionBagPlayer_0_0_mmr": "2500.0",
        "MissionBagPlayer_0_0_blood_line_name": "Floaty",
        "MissionBagPlayer_0_0_hadWellspring": "true",
        "MissionBagPlayer_0_0_kills": "3",
        "MissionBagPlayer_0_0_ownteam": "1",
    }

    (player,) = extract_players(attrs)

    assert player.mmr == 2500
    assert player.kills == 3
    assert player.is_own_team is True


def test_fingerprint_and_roster_key_are_set() -> None:
    summary = extract_match_summary(_as_text(sample_match_entries()), match_timestamp=TS)
    changed = extract_match_summary(
        _as_text(sample_match_entries(kills_enemy=2)), match_timestamp=TS
    )

    assert summary.source_fingerprint != changed.source_fingerprint
    assert summary.roster_key == changed.roster_key
    assert summary.num_teams == 2
    assert [p.display_name for p in summary.own_team] == ["Solo Hunter"]
