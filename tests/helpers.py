from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from xml.sax.saxutils import quoteattr


def attributes_xml(entries: Mapping[str, object] | Iterable[tuple[str, object]]) -> str:
    """Render entries the way the game client writes attributes.xml."""

    items = entries.items() if isinstance(entries, Mapping) else entries
    lines = ["<Attributes Version=\"29\">"]
    for name, value in items:
        lines.append(f" <Attr name={quoteattr(name)} value={quoteattr(str(value))}/>")
    lines.append("</Attributes>")
    return "\n".join(lines) + "\n"


def player_entries(
    team: int,
    player: int,
    *,
    name: str,
    mmr: int | str | None,
    profile_id: str = "",
    kills: int = 0,
    deaths: int = 0,
    extracted: bool = False,
) -> dict[str, object]:
    prefix = f"MissionBagPlayer_{team}_{player}_"
    entries: dict[str, object] = {
        f"{prefix}blood_line_name": name,
        f"{prefix}profileid": profile_id,
        f"{prefix}killedme": kills,
        f"{prefix}killedbyme": deaths,
        f"{prefix}teamextraction": "true" if extracted else "false",
        f"{prefix}tooltipkilledbyme": "~",
    }
    if mmr is not None:
        entries[f"{prefix}mmr"] = mmr
    return entries


def sample_match_entries(*, kills_enemy: int = 1) -> dict[str, object]:
    """
    Two-team match: our solo (team 0) and a duo (team 1).
    Team 2 holds leftovers from an earlier, larger match.
    """
    entries: dict[str, object] = {"MissionBagNumTeams": 2}
    entries.update({"MissionBagTeam_0_numplayers": 1, "MissionBagTeam_0_ownteam": "true"})
    entries.update({"MissionBagTeam_1_numplayers": 2, "MissionBagTeam_1_ownteam": "false"})
    entries.update(player_entries(0, 0, name="Solo Hunter", mmr=2650, profile_id="111", kills=2))
    entries.update(
        player_entries(1, 0, name="Duo One", mmr=3010, profile_id="222", kills=kills_enemy)
    )
    entries.update(player_entries(1, 1, name="Duo Two", mmr=2890, profile_id="333", deaths=1))
    entries.update(player_entries(2, 0, name="Old Match", mmr=1900, profile_id="999", kills=5))
    return entries


def write_attributes(
    path: Path, entries: Mapping[str, object], *, mtime_ns: int | None = None
) -> None:
    path.write_text(attributes_xml(entries), encoding="utf-8")
    if mtime_ns is not None:
        os.utime(path, ns=(mtime_ns, mtime_ns))
