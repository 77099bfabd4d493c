from vetmatch.safety.crisis import CRISIS_TERMS, CrisisMatch, check_crisis, detect_crisis
from vetmatch.safety.crisis_bundle import build_crisis_response, crisis_recommendations, is_crisis_line

__all__ = [
    "CRISIS_TERMS",
    "CrisisMatch",
    "check_crisis",
    "detect_crisis",
    "build_crisis_response",
    "crisis_recommendations",
    "is_crisis_line",
]
