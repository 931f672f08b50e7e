from __future__ import annotations

import re

_whitespace_re = re.compile(r"\s+")


def normalize_player_name(value: str) -> str:
    """Normalize a display name for stable comparison across rewrites of the same match."""

    v = value.strip().casefold()
    v = _whitespace_re.sub(" ", v)
    return v


def parse_bool_text(value: str) -> bool:
    v = value.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("", "0", "false", "no", "n", "off"):
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def parse_int_text(value: str) -> int:
    v = value.strip()
    try:
        return int(v)
    except ValueError:
        # The client occasionally writes integral stats as "12.0".
        f = float(v)
        if not f.is_integer():
            raise ValueError(f"Not an integer: {value!r}") from None
        return int(f)
