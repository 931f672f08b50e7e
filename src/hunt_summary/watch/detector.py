from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from hunt_summary.attributes.types import SourceMarker
from hunt_summary.match.models import MatchSummary
from hunt_summary.watch.history import ProcessedHistory


class Classification(StrEnum):
    NEW = "new"
    DUPLICATE = "duplicate"
    SUPERSEDING = "superseding"

    @property
    def should_emit(self) -> bool:
        return self is not Classification.DUPLICATE


@dataclass(frozen=True)
class Detection:
    classification: Classification
    reason: str


def classify_match(
    summary: MatchSummary,
    history: ProcessedHistory,
    *,
    marker: SourceMarker,
) -> Detection:
    """Decide whether `summary` is a new match, a repeat, or a correction of the last one.

    - Same fingerprint as the last emission -> DUPLICATE.
    - Nothing emitted yet -> NEW.
    - Source file newer than the last emission:
      same roster -> SUPERSEDING (stats changed after the fact, e.g. late kill credit),
      different roster -> NEW.
    - Different content but the file is not newer -> DUPLICATE (stale rewrite).
    """
    if history.is_empty:
        return Detection(Classification.NEW, "no previous emission")

    if summary.source_fingerprint == history.fingerprint:
        return Detection(Classification.DUPLICATE, "fingerprint matches last emission")

    if not marker.is_newer_than(history.marker):
        return Detection(
            Classification.DUPLICATE,
            "content differs but source file is not newer than last emission",
        )

    if summary.roster_key == history.roster_key:
        return Detection(Classification.SUPERSEDING, "same roster with changed stats")

    return Detection(Classification.NEW, "fingerprint and roster differ from last emission")
