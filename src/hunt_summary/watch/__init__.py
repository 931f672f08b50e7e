from hunt_summary.watch.detector import Classification, Detection, classify_match
from hunt_summary.watch.history import (
    ProcessedHistory,
    load_history,
    resume_history,
    save_history,
)
from hunt_summary.watch.loop import LoopState, PollResult, PollStatus, WatchConfig, WatchLoop

__all__ = [
    "Classification",
    "Detection",
    "LoopState",
    "PollResult",
    "PollStatus",
    "ProcessedHistory",
    "WatchConfig",
    "WatchLoop",
    "classify_match",
    "load_history",
    "resume_history",
    "save_history",
]
