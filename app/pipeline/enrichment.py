"""
Enrichment orchestrator — takes one discovered place from the crawler dataset
through identity upsert, website text, feature detection, classification,
persistence and scoring.

Best-effort steps (site text, deep contacts, classification) absorb their own
failures. Store writes (lead upsert, tech analysis, score, events) raise, and
the dispatcher records that item as failed; the lead row written before the
failure stays in place.
"""
import logging
import time
from typing import Dict, List, Any, Optional

from app import config
from app.pipeline.base import RunOptions
from app.pipeline.features import detect_features
from app.pipeline.scoring import compute_tech_score, subscores, tier_from_score
from app.pipeline.targeting import is_chain, passes_keyword_filters
from app.services import apify as apify_service
from app.services import db
from app.services.classifier import classify_site_text
from app.services.webtext import fetch_site_text

logger = logging.getLogger('pipeline.enrichment')

OUTCOME_ENRICHED = 'enriched'
OUTCOME_SKIPPED_CHAIN = 'skipped_chain'
OUTCOME_SKIPPED_KEYWORDS = 'skipped_keywords'


# ── Record normalization ─────────────────────────────────────────────────────

def _first(item: Dict[str, Any], *keys):
    for key in keys:
        value = item.get(key)
        if value not in (None, ''):
            return value
    return None


def build_base_record(item: Dict[str, Any]) -> Dict[str, Any]:
    """Map a places-crawler item onto lead fields, with synonym fallbacks."""
    location = item.get('location') or {}
    return {
        'google_place_id': item.get('placeId') or None,
        'name': item.get('title') or '',
        'address': _first(item, 'address', 'streetAddress'),
        'city': item.get('city'),
        'state': item.get('state'),
        'postal_code': item.get('postalCode'),
        'latitude': location.get('lat'),
        'longitude': location.get('lng'),
        'phone': item.get('phone') or None,
        'website': _first(item, 'website', 'url'),
        'email': item.get('email') or None,
        'rating': _first(item, 'rating', 'stars'),
        'review_count': _first(item, 'reviewsCount', 'reviews'),
        'categories': item.get('categories') or [],
        'opening_hours': item.get('openingHours'),
        'temporarily_closed': bool(item.get('temporarilyClosed')),
        'permanently_closed': bool(item.get('permanentlyClosed')),
    }


# ── Best-effort external steps ───────────────────────────────────────────────

def acquire_site_text(website: Optional[str], log_prefix: str = '[lead]') -> str:
    """Markdown actor first, direct fetch as fallback. Never raises."""
    if not website:
        return ''
    try:
        text = apify_service.fetch_website_markdown(website)
        logger.info("%s markdown extracted, chars=%d", log_prefix, len(text))
        return text
    except Exception as e:
        logger.warning("%s markdown extraction failed, falling back to direct fetch: %s", log_prefix, e)
    return fetch_site_text(website)


def _collect_contacts(items: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    found = {'emails': [], 'phones': [], 'social_links': []}
    for item in items:
        for key, field in (('emails', 'emails'), ('phones', 'phoneNumbers'), ('social_links', 'socialMedia')):
            values = item.get(field) or []
            if isinstance(values, dict):
                values = [v for v in values.values() if v]
            if isinstance(values, str):
                values = [values]
            for v in values:
                if isinstance(v, str) and v not in found[key]:
                    found[key].append(v)
    return found


def find_deep_contacts(lead_id: int, website: Optional[str], log_prefix: str = '[lead]') -> List[Dict]:
    """Contact scrape via the deep contacts actor. Failures are logged, never raised."""
    if not website or not config.DEEP_CONTACTS_ENABLED:
        return []
    try:
        items = apify_service.scrape_contacts(website)
        contacts = _collect_contacts(items)
        db.record_event(lead_id, 'contacts_found', {'count': len(items), **contacts})
        logger.info("%s deep contacts: %d items", log_prefix, len(items))
        return items
    except Exception as e:
        logger.warning("%s deep contacts failed: %s", log_prefix, e)
        return []


# ── Scoring ──────────────────────────────────────────────────────────────────

def specialty_boost(specialties, policy: Dict[str, Any] = None) -> int:
    """
    Score boost from classifier specialties.

    Default policy (from config): any primary specialty (cosmetic, aligners) → 60,
    any other specialty → 40, none → 0.
    """
    policy = policy or {
        'primary': config.SPECIALTY_BOOST_PRIMARY,
        'primary_value': config.SPECIALTY_BOOST_PRIMARY_VALUE,
        'any_value': config.SPECIALTY_BOOST_ANY_VALUE,
    }
    specialties = [str(s).lower() for s in (specialties or [])]
    if any(s in policy['primary'] for s in specialties):
        return policy['primary_value']
    if specialties:
        return policy['any_value']
    return 0


def rescore_lead(lead_id: int) -> Dict[str, Any]:
    """Recompute and store the lead's score from its stored metadata + tech analysis."""
    lead, tech = db.get_scoring_inputs(lead_id)
    if lead is None:
        raise LookupError(f"Lead {lead_id} not found")
    tech = tech or {}

    tech_score = compute_tech_score(tech)
    parts = subscores(
        tech_score=tech_score,
        rating=float(lead.get('rating') or 0),
        reviews=int(lead.get('review_count') or 0),
        has_booking=bool(tech.get('has_online_scheduling')),
        specialty_boost=specialty_boost(tech.get('llm_specialties')),
    )
    tier, qual = tier_from_score(parts['final'])

    db.update_lead_score(lead_id, {
        'tech_score': tech_score,
        'tech_tier': tier,
        'investment_level': tier,
        'qualification_status': qual,
        'final_score': parts['final'],
        'final_score_explanation': tech.get('llm_notes') or None,
    })
    db.record_event(lead_id, 'rescored', {'subscores': parts, 'tier': tier, 'qual': qual})
    return {'tech_score': tech_score, 'tier': tier, 'qual': qual, **parts}


# ── Per-item sequence ────────────────────────────────────────────────────────

def enrich_item(item: Dict[str, Any], options: RunOptions, context: Dict[str, Any] = None) -> str:
    """
    Run one discovered place through the full enrichment sequence.

    context carries the run/dataset ids recorded on the 'created' event.
    Returns one of the OUTCOME_* values.
    """
    context = context or {}
    base = build_base_record(item)
    log_prefix = f"[lead] {base['google_place_id'] or base['name']}"

    if options.avoid_chains and is_chain(base['name']):
        logger.info("%s skipped: chain", log_prefix)
        return OUTCOME_SKIPPED_CHAIN

    started = time.monotonic()
    lead_id = db.upsert_lead(base)

    site_text = acquire_site_text(base['website'], log_prefix)

    if not passes_keyword_filters(site_text, options.include_keywords, options.exclude_keywords):
        logger.info("%s skipped: keyword filters", log_prefix)
        return OUTCOME_SKIPPED_KEYWORDS

    find_deep_contacts(lead_id, base['website'], log_prefix)

    features = detect_features(site_text)
    classification = classify_site_text(site_text)

    db.save_tech_analysis(lead_id, {
        **features,
        'website_text_excerpt': site_text[:config.TECH_EXCERPT_MAX_CHARS] if site_text else None,
        'llm_specialties': classification.get('specialties') or [],
        'llm_notes': classification.get('notes') or None,
    })
    score = rescore_lead(lead_id)

    db.record_event(lead_id, 'created', {
        'runId': context.get('run_id'),
        'datasetId': context.get('dataset_id'),
    })

    logger.info("%s enriched in %dms (score=%s, tier=%s)",
                log_prefix, (time.monotonic() - started) * 1000, score['final'], score['tier'])
    return OUTCOME_ENRICHED
