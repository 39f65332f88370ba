"""
Lead scoring — tech score from feature flags, weighted composite, tier.

Pure functions; the enrichment orchestrator supplies the specialty boost and
persists the result.
"""
import math
from typing import Dict, Any, Mapping, Tuple

TECH_WEIGHTS = {
    'has_online_scheduling': 25,
    'has_patient_portal': 20,
    'has_text_reminders': 15,
    'has_digital_forms': 10,
    'has_online_payments': 10,
    'has_virtual_consults': 10,
    'has_advanced_imaging': 10,
}

SUBSCORE_WEIGHTS = {
    's_tech': 0.40,
    's_booking': 0.15,
    's_rating': 0.15,
    's_reviews': 0.10,
    's_special': 0.20,
}

# Rating below the floor scores 0, at the ceiling 100, linear in between
RATING_FLOOR = 3.5
RATING_CEILING = 5.0

# (minimum reviews, sub-score), highest first
REVIEW_STEPS = [
    (200, 100),
    (100, 80),
    (50, 60),
    (25, 40),
    (10, 20),
]

# (minimum final score, tier, qualification), highest first
TIERS = [
    (80, 'PLATINUM', 'HOT'),
    (60, 'GOLD', 'HOT'),
    (40, 'SILVER', 'WARM'),
    (20, 'BRONZE', 'COOL'),
]
BASE_TIER = ('BASIC', 'COLD')


def _clamp(value, low=0, high=100):
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _flag(flags, name) -> bool:
    if isinstance(flags, Mapping):
        return bool(flags.get(name))
    return bool(getattr(flags, name, False))


def compute_tech_score(flags) -> int:
    """Sum of weights for set flags, capped at 100. Accepts a dict or a TechAnalysis row."""
    if flags is None:
        return 0
    score = sum(weight for name, weight in TECH_WEIGHTS.items() if _flag(flags, name))
    return min(100, score)


def rating_subscore(rating) -> float:
    rating = float(rating or 0)
    return _clamp((rating - RATING_FLOOR) / (RATING_CEILING - RATING_FLOOR) * 100)


def reviews_subscore(reviews) -> int:
    reviews = reviews or 0
    for minimum, score in REVIEW_STEPS:
        if reviews >= minimum:
            return score
    return 0


def subscores(tech_score=0, rating=0, reviews=0, has_booking=False, specialty_boost=0) -> Dict[str, Any]:
    """
    Five normalized sub-scores and the weighted final score.

    Returns dict with s_tech, s_booking, s_rating, s_reviews, s_special and
    final (int in [0, 100], halves rounded up).
    """
    parts = {
        's_tech': _clamp(tech_score or 0),
        's_booking': 100 if has_booking else 0,
        's_rating': rating_subscore(rating),
        's_reviews': reviews_subscore(reviews),
        's_special': _clamp(specialty_boost or 0),
    }
    weighted = sum(SUBSCORE_WEIGHTS[k] * v for k, v in parts.items())
    parts['final'] = _clamp(_round_half_up(weighted))
    return parts


def tier_from_score(score) -> Tuple[str, str]:
    """(tier, qualification status) for a final score; lower band bounds inclusive."""
    for minimum, tier, qual in TIERS:
        if score >= minimum:
            return tier, qual
    return BASE_TIER
