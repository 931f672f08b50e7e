from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

RawAttributeMap = Mapping[str, str]


@dataclass(frozen=True)
class SourceMarker:
    """
    Modification marker of the source file at the time it was read.
    Equality means "same file state"; recency is judged by mtime alone.
    """
    mtime_ns: int
    size: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> SourceMarker:
        return cls(mtime_ns=st.st_mtime_ns, size=st.st_size)

    def is_newer_than(self, other: SourceMarker | None) -> bool:
        if other is None:
            return True
        return self.mtime_ns > other.mtime_ns
