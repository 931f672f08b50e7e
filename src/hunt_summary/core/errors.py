from __future__ import annotations

from dataclasses import dataclass


class HuntSummaryError(RuntimeError):
    """Base exception for match summary extraction failures."""


class TransientError(HuntSummaryError):
    """Expected while the game client is still writing; retried on the next poll."""


class FileAccessError(TransientError):
    """Source file is missing, locked, or otherwise unreadable."""


class EmptyDocument(TransientError):
    """Document parsed but holds no attribute entries."""


class NoPlayersFound(TransientError):
    """Document holds attributes but no usable player slots."""


@dataclass(frozen=True)
class IncompleteMatchData(TransientError):
    """Required player keys are absent or unreadable (file captured mid-write)."""
    message: str
    context: dict[str, object] | None = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


class MalformedDocument(HuntSummaryError):
    """Document is not well-formed XML."""


class SinkWriteError(HuntSummaryError):
    """Output table could not be written."""


class HistoryError(HuntSummaryError):
    """Marker file exists but could not be read back into a history."""


def format_failure_reason(exc: BaseException, *, max_len: int = 300) -> str:
    msg = str(exc).strip() or exc.__class__.__name__
    reason = f"{exc.__class__.__name__}: {msg}"
    if len(reason) > max_len:
        return f"{reason[: max_len - 1]}…"
    return reason
