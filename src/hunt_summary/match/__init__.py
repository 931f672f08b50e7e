from hunt_summary.match.extractor import extract_match_summary, extract_players
from hunt_summary.match.fingerprint import compute_fingerprint, compute_roster_key
from hunt_summary.match.models import MatchSummary, PlayerRecord

__all__ = [
    "MatchSummary",
    "PlayerRecord",
    "compute_fingerprint",
    "compute_roster_key",
    "extract_match_summary",
    "extract_players",
]
