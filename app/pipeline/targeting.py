"""
Targeting presets, chain denylist and keyword filters for dental practices.
"""
import math
from typing import Dict, List, Any, Iterable

from app.pipeline.base import RunOptions

SEARCH_PRESETS: Dict[str, List[str]] = {
    'general': ['dentist', 'dental clinic', 'family dentist'],
    'cosmetic': [
        'cosmetic dentist', 'veneers', 'smile makeover', 'esthetic dentist',
        'teeth whitening', 'invisalign dentist', 'smile design',
    ],
    'implants': ['dental implants', 'all-on-4', 'full arch implants', 'implant dentist', 'teeth in a day'],
    'aligners_ortho': ['invisalign dentist', 'clear aligners', 'orthodontist', 'braces', 'aligner therapy'],
    'prosthodontics': ['prosthodontist', 'full mouth reconstruction', 'crowns and bridges', 'rehabilitation dentist'],
    'digital': [
        'digital dentistry', 'CEREC', 'same day crown', 'intraoral scanner',
        '3d printer', 'itero', 'cbct', 'digital workflow',
    ],
}

# Multi-location groups; skipped when avoidChains is on
CHAIN_DENYLIST = [c.lower() for c in (
    'Aspen Dental', 'Western Dental', 'Pacific Dental', 'Heartland Dental',
    'Smile Direct Club', 'Ideal Dental', 'Bright Now Dental', 'DentalWorks',
    'Affordable Dentures', 'ClearChoice', 'Coast Dental', 'Great Expressions',
    'Aspire Dental', 'Midwest Dental', 'InterDent', 'MB2 Dental', 'Dental Care Alliance',
)]


def search_strings(preset: str) -> List[str]:
    return SEARCH_PRESETS.get(preset) or SEARCH_PRESETS['general']


def build_places_input(options: RunOptions) -> Dict[str, Any]:
    """Input for the places crawler; the result cap is spread across the preset's searches."""
    searches = search_strings(options.preset)
    return {
        'searchStringsArray': searches,
        'locationQuery': options.location,
        'maxCrawledPlacesPerSearch': max(1, math.ceil(options.max_results / len(searches))),
        'includeWebsite': True,
        'skipPlacesWithoutWebsite': True,
        'additionalInfo': True,
        'enrichPlaceWithBusinessLeads': True,
        'minReviews': options.min_reviews,
        'minRating': options.min_rating,
    }


def is_chain(name: str) -> bool:
    """True when the business name contains a known chain brand (case-insensitive)."""
    lowered = (name or '').lower()
    return any(chain in lowered for chain in CHAIN_DENYLIST)


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(str(k).lower() in text for k in keywords)


def passes_keyword_filters(text: str, include: List[str], exclude: List[str]) -> bool:
    """
    Include list: at least one keyword must appear. Exclude list: none may appear.
    Empty lists impose nothing.
    """
    lowered = (text or '').lower()
    if include and not _contains_any(lowered, include):
        return False
    if exclude and _contains_any(lowered, exclude):
        return False
    return True
