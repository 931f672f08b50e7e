from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from hunt_summary.core.text import parse_bool_text, parse_int_text

# Match-level keys
NUM_TEAMS_KEY = "MissionBagNumTeams"
PLAYER_PREFIX = "MissionBagPlayer"
TEAM_PREFIX = "MissionBagTeam"

# Slot-shaped player keys carry their indices as values.
TEAM_INDEX_SUFFIXES: tuple[str, ...] = ("teamindex", "team_index", "team")
PLAYER_INDEX_SUFFIXES: tuple[str, ...] = ("index", "playerindex", "player_index", "player")

# Team-level suffixes
TEAM_NUM_PLAYERS_SUFFIX = "numplayers"
TEAM_OWN_TEAM_SUFFIX = "ownteam"


def _text(value: str) -> str:
    return value.strip()


@dataclass(frozen=True)
class FieldSpec:
    """How one PlayerRecord attribute is resolved from a player's key suffixes."""
    field: str
    suffixes: tuple[str, ...]
    parse: Callable[[str], Any]
    default: Any = None
    required: bool = False
    identity: bool = False

    def lookup(self, values: Mapping[str, str]) -> str | None:
        # First alias present with a non-empty value wins.
        for suffix in self.suffixes:
            raw = values.get(suffix)
            if raw is not None and raw.strip() != "":
                return raw
        return None


# Known per-player suffixes. Anything not listed here is ignored.
PLAYER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        "display_name",
        ("blood_line_name", "name", "displayname", "display_name"),
        _text,
        default="",
        identity=True,
    ),
    FieldSpec("mmr", ("mmr",), parse_int_text, required=True, identity=True),
    FieldSpec("profile_id", ("profileid", "profile_id"), _text, default="", identity=True),
    # killedme: times this player killed the local user; killedbyme: the reverse.
    FieldSpec("kills", ("kills", "killedme"), parse_int_text, default=0),
    FieldSpec("deaths", ("deaths", "killedbyme"), parse_int_text, default=0),
    FieldSpec("assists", ("assists",), parse_int_text, default=0),
    FieldSpec("survived", ("survived", "teamextraction"), parse_bool_text, default=False),
    FieldSpec("is_own_team", ("ownteam", "isownteam"), parse_bool_text, default=None),
)
