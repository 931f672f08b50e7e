from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

from hunt_summary.attributes.decoder import (
    decode_attribute_document,
    read_attribute_file,
    stat_attribute_file,
)
from hunt_summary.attributes.types import SourceMarker
from hunt_summary.core.config import Settings, SupersedingPolicy
from hunt_summary.core.errors import (
    FileAccessError,
    MalformedDocument,
    SinkWriteError,
    TransientError,
    format_failure_reason,
)
from hunt_summary.match.extractor import extract_match_summary
from hunt_summary.match.models import MatchSummary
from hunt_summary.output.csv_sink import CsvMatchSink
from hunt_summary.watch.detector import Classification, Detection, classify_match
from hunt_summary.watch.history import ProcessedHistory, save_history

logger = logging.getLogger(__name__)


class LoopState(StrEnum):
    IDLE = "idle"
    READING = "reading"
    PROCESSING = "processing"
    EMITTING = "emitting"
    ERROR = "error"


class PollStatus(StrEnum):
    UNCHANGED = "unchanged"
    EMITTED = "emitted"
    DUPLICATE = "duplicate"
    TRANSIENT = "transient"
    MALFORMED = "malformed"
    FILE_ERROR = "file_error"
    SINK_ERROR = "sink_error"


@dataclass(frozen=True)
class PollResult:
    status: PollStatus
    detection: Detection | None = None
    output_path: Path | None = None
    error: str | None = None

    @property
    def emitted(self) -> bool:
        return self.status is PollStatus.EMITTED

    @property
    def failed(self) -> bool:
        return self.status in (PollStatus.MALFORMED, PollStatus.FILE_ERROR, PollStatus.SINK_ERROR)


@dataclass(frozen=True)
class WatchConfig:
    input_path: Path
    zero_based: bool = False
    superseding_policy: SupersedingPolicy = SupersedingPolicy.APPEND
    poll_interval_s: float = 2.0
    error_backoff_s: float = 5.0
    malformed_threshold: int = 3
    # None disables marker persistence.
    marker_path: Path | None = None

    @classmethod
    def from_settings(cls, s: Settings) -> WatchConfig:
        return cls(
            input_path=s.input_path,
            zero_based=s.zero_based,
            superseding_policy=s.superseding_policy,
            poll_interval_s=s.poll_interval_s,
            error_backoff_s=s.error_backoff_s,
            malformed_threshold=s.malformed_threshold,
            marker_path=s.marker_path,
        )


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class WatchLoop:
    """
    Polls the attribute file and emits one table per genuinely new match.

    One iteration (`poll`) walks IDLE -> READING -> PROCESSING -> EMITTING -> IDLE,
    or lands in ERROR for unreadable files, persistent parse failures and sink
    failures. Half-written documents are expected and retried on the next poll.
    History only advances after the sink confirmed the write.
    """

    config: WatchConfig
    sink: CsvMatchSink
    history: ProcessedHistory = field(default_factory=ProcessedHistory)
    state: LoopState = LoopState.IDLE

    _sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    _now: Callable[[], datetime] = field(default=_local_now, repr=False)

    _last_checked: SourceMarker | None = field(default=None, init=False, repr=False)
    _malformed_streak: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        # A file untouched since the last emission needs no re-read.
        self._last_checked = self.history.marker

    # -----------------------------
    # One iteration
    # -----------------------------

    def poll(self) -> PollResult:
        self.state = LoopState.IDLE
        path = self.config.input_path

        try:
            current = stat_attribute_file(path)
        except FileAccessError as e:
            return self._error(PollStatus.FILE_ERROR, e)

        if current == self._last_checked:
            return PollResult(PollStatus.UNCHANGED)

        self.state = LoopState.READING
        try:
            raw, marker = read_attribute_file(path)
        except FileAccessError as e:
            return self._error(PollStatus.FILE_ERROR, e)

        self.state = LoopState.PROCESSING
        try:
            summary = self._extract(raw, marker)
        except MalformedDocument as e:
            self._malformed_streak += 1
            if self._malformed_streak >= self.config.malformed_threshold:
                # Surface once, then wait for the file to change.
                self._last_checked = marker
                self._malformed_streak = 0
                return self._error(PollStatus.MALFORMED, e)
            logger.warning(
                "Malformed document (attempt %d/%d), retrying: %s",
                self._malformed_streak,
                self.config.malformed_threshold,
                e,
            )
            self.state = LoopState.IDLE
            return PollResult(PollStatus.TRANSIENT, error=format_failure_reason(e))
        except TransientError as e:
            self._malformed_streak = 0
            logger.debug("Match data not ready yet: %s", e)
            self.state = LoopState.IDLE
            return PollResult(PollStatus.TRANSIENT, error=format_failure_reason(e))

        self._malformed_streak = 0

        detection = classify_match(summary, self.history, marker=marker)
        if not detection.classification.should_emit:
            logger.debug("Skipping match: %s", detection.reason)
            self._last_checked = marker
            self.state = LoopState.IDLE
            return PollResult(PollStatus.DUPLICATE, detection=detection)

        return self._emit(summary, marker, detection)

    def _extract(self, raw: bytes, marker: SourceMarker) -> MatchSummary:
        attrs = decode_attribute_document(raw)
        match_timestamp = datetime.fromtimestamp(marker.mtime_ns / 1_000_000_000, tz=UTC)
        return extract_match_summary(attrs, match_timestamp=match_timestamp)

    def _emit(
        self,
        summary: MatchSummary,
        marker: SourceMarker,
        detection: Detection,
    ) -> PollResult:
        self.state = LoopState.EMITTING

        replace_path: Path | None = None
        if (
            detection.classification is Classification.SUPERSEDING
            and self.config.superseding_policy is SupersedingPolicy.OVERWRITE
            and self.history.output_path is not None
            and self.history.output_path.exists()
        ):
            replace_path = self.history.output_path

        now = self._now()
        try:
            output_path = self.sink.write(
                summary,
                zero_based=self.config.zero_based,
                timestamp=now,
                replace=replace_path,
            )
        except SinkWriteError as e:
            # History stays put so the same match is detected as new again next poll.
            return self._error(PollStatus.SINK_ERROR, e, detection=detection)

        self.history = self.history.advance(
            summary, marker=marker, output_path=output_path, emitted_at=now
        )
        self._last_checked = marker
        self._persist_history()

        verb = "Updated" if replace_path is not None else "Saved"
        logger.info(
            "%s player summary (%s, %d players): %s",
            verb,
            detection.classification.value,
            len(summary.players),
            output_path,
        )
        self.state = LoopState.IDLE
        return PollResult(PollStatus.EMITTED, detection=detection, output_path=output_path)

    def _persist_history(self) -> None:
        if self.config.marker_path is None:
            return
        try:
            save_history(self.config.marker_path, self.history)
        except OSError as e:
            logger.error("Could not update marker file %s: %s", self.config.marker_path, e)

    def _error(
        self,
        status: PollStatus,
        exc: BaseException,
        *,
        detection: Detection | None = None,
    ) -> PollResult:
        reason = format_failure_reason(exc)
        if status is PollStatus.FILE_ERROR:
            logger.warning("Source file unavailable: %s", reason)
        else:
            logger.error("%s", reason)
        self.state = LoopState.ERROR
        return PollResult(status, detection=detection, error=reason)

    # -----------------------------
    # Modes
    # -----------------------------

    def run_once(self) -> PollResult:
        """Single-run mode: one check, one attempt."""
        return self.poll()

    def run(self, *, max_polls: int | None = None) -> None:
        """Poll forever (or `max_polls` times), sleeping between iterations."""

        polls = 0
        while max_polls is None or polls < max_polls:
            self.poll()
            polls += 1

            delay = self.config.poll_interval_s
            if self.state is LoopState.ERROR:
                delay += self.config.error_backoff_s
            self._sleep(delay)
            self.state = LoopState.IDLE
