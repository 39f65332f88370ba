"""
Practice specialty classifier — website text → {specialties, notes} via Claude.

A fast model answers first; when it finds nothing on a page with real content,
the stronger model gets one try. Any API, circuit or parse failure degrades to
empty output so enrichment carries on.
"""
import json
import logging
import re
from typing import Dict, Any

from app.config import (
    CLASSIFIER_MODEL, CLASSIFIER_ESCALATION_MODEL, CLASSIFIER_INPUT_MAX_CHARS,
)
from app.extensions import anthropic_client as client

logger = logging.getLogger('services.classifier')

SPECIALTY_VOCABULARY = (
    'cosmetic', 'aligners', 'implants', 'sedation',
    'ortho', 'perio', 'prostho', 'endo',
)

NOTES_MAX_CHARS = 300

# Escalate only when the page had enough text to judge
ESCALATION_MIN_CHARS = 800

PROMPT = """Extract as JSON:
- specialties: array from {%s}
- notes: one 1-2 sentence rationale.
Return ONLY JSON. Text:
%s"""

_FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


def _empty() -> Dict[str, Any]:
    return {'specialties': [], 'notes': ''}


def parse_classification(raw: str) -> Dict[str, Any]:
    """Parse model output; anything that is not the expected JSON object → empty."""
    try:
        data = json.loads(_FENCE_RE.sub('', (raw or '').strip()))
    except (ValueError, TypeError):
        return _empty()
    if not isinstance(data, dict):
        return _empty()

    specialties = []
    for s in data.get('specialties') or []:
        if isinstance(s, str) and s.strip().lower() in SPECIALTY_VOCABULARY:
            tag = s.strip().lower()
            if tag not in specialties:
                specialties.append(tag)
    notes = data.get('notes')
    return {
        'specialties': specialties,
        'notes': notes[:NOTES_MAX_CHARS] if isinstance(notes, str) else '',
    }


def _run_model(model: str, site_text: str) -> Dict[str, Any]:
    from app.services.circuit_breaker import get_breaker
    prompt = PROMPT % (', '.join(SPECIALTY_VOCABULARY), (site_text or '')[:CLASSIFIER_INPUT_MAX_CHARS])
    response = get_breaker('anthropic').call(
        client.messages.create,
        model=model,
        max_tokens=350,
        temperature=0.2,
        messages=[{'role': 'user', 'content': prompt}],
    )
    raw = response.content[0].text if response.content else ''
    return parse_classification(raw)


def classify_site_text(site_text: str) -> Dict[str, Any]:
    """Classify practice specialties from website text. Never raises."""
    if client is None or not site_text:
        return _empty()

    try:
        result = _run_model(CLASSIFIER_MODEL, site_text)
    except Exception as e:
        logger.warning("Classifier call failed (%s): %s", CLASSIFIER_MODEL, e)
        return _empty()

    if not result['specialties'] and len(site_text) > ESCALATION_MIN_CHARS:
        try:
            stronger = _run_model(CLASSIFIER_ESCALATION_MODEL, site_text)
        except Exception as e:
            logger.warning("Escalation call failed (%s): %s", CLASSIFIER_ESCALATION_MODEL, e)
            return result
        if stronger['specialties']:
            logger.info("Escalated classification found %s", stronger['specialties'])
            return {**stronger, 'escalated': True}

    return result
