"""
Shared pipeline types.

RunOptions is what a client submits and what the webhook worker later reads
back from the run record. BatchResult is the uniform summary of one
dispatcher pass over a dataset.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional


class OptionsError(ValueError):
    """Submitted targeting options are missing or malformed."""


def _keyword_list(value, name) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(k, str) for k in value):
        raise OptionsError(f"{name} must be a list of strings")
    return [k.strip() for k in value if k.strip()]


def _number(value, name, cast):
    if isinstance(value, bool):
        raise OptionsError(f"{name} must be a number")
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise OptionsError(f"{name} must be a number")


def _boolean(value, name, default) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise OptionsError(f"{name} must be a boolean")
    return value


@dataclass
class RunOptions:
    """Targeting + filtering options for one crawl run."""
    location: str = ''
    max_results: int = 40
    preset: str = 'general'
    min_rating: float = 3.8
    min_reviews: int = 10
    avoid_chains: bool = True
    include_keywords: List[str] = field(default_factory=list)
    exclude_keywords: List[str] = field(default_factory=list)

    @classmethod
    def from_request(cls, data: Optional[Dict[str, Any]]) -> 'RunOptions':
        """Validate a submission body (camelCase keys). Raises OptionsError."""
        data = data or {}
        location = data.get('location')
        if not location or not isinstance(location, str) or not location.strip():
            raise OptionsError('location required')

        max_results = _number(data.get('maxResults', 40), 'maxResults', int)
        if max_results < 1:
            raise OptionsError('maxResults must be at least 1')

        return cls(
            location=location.strip(),
            max_results=max_results,
            preset=str(data.get('preset') or 'general'),
            min_rating=_number(data.get('minRating', 3.8), 'minRating', float),
            min_reviews=_number(data.get('minReviews', 10), 'minReviews', int),
            avoid_chains=_boolean(data.get('avoidChains'), 'avoidChains', True),
            include_keywords=_keyword_list(data.get('includeKeywords'), 'includeKeywords'),
            exclude_keywords=_keyword_list(data.get('excludeKeywords'), 'excludeKeywords'),
        )

    @classmethod
    def from_meta(cls, meta: Optional[Dict[str, Any]]) -> 'RunOptions':
        """Lenient read of a stored options blob; bad or missing fields fall back to defaults."""
        meta = meta or {}
        include = meta.get('includeKeywords')
        exclude = meta.get('excludeKeywords')
        avoid = meta.get('avoidChains')
        return cls(
            location=meta.get('location') or '',
            max_results=meta.get('maxResults') or 40,
            preset=meta.get('preset') or 'general',
            min_rating=meta.get('minRating', 3.8),
            min_reviews=meta.get('minReviews', 10),
            avoid_chains=True if avoid is None else bool(avoid),
            include_keywords=[str(k) for k in include] if isinstance(include, list) else [],
            exclude_keywords=[str(k) for k in exclude] if isinstance(exclude, list) else [],
        )

    def to_meta(self) -> Dict[str, Any]:
        return {
            'location': self.location,
            'maxResults': self.max_results,
            'preset': self.preset,
            'minRating': self.min_rating,
            'minReviews': self.min_reviews,
            'avoidChains': self.avoid_chains,
            'includeKeywords': list(self.include_keywords),
            'excludeKeywords': list(self.exclude_keywords),
        }


@dataclass
class BatchResult:
    """Summary of one dispatcher pass."""
    total: int = 0
    processed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    outcomes: Dict[int, Any] = field(default_factory=dict)
