"""
Lead identity resolution.

A discovered business is the same Lead as a stored row when any of its
non-null keys (Google place id, website domain, phone) matches. Lookups are
read-only; writes happen in app.services.db.upsert_lead.
"""
import logging
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy import or_

from app.models.lead import Lead

logger = logging.getLogger('pipeline.identity')


def domain_from_url(url: Optional[str]) -> Optional[str]:
    """'https://www.Example.com/x' → 'example.com'. None when there is no usable host."""
    if not url:
        return None
    try:
        host = urlparse(str(url).strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    host = host.lower()
    if host.startswith('www.'):
        host = host[4:]
    return host or None


def identity_clauses(place_id=None, domain=None, phone=None):
    """OR-filter terms for whichever identity keys are present."""
    clauses = []
    if place_id:
        clauses.append(Lead.google_place_id == place_id)
    if domain:
        clauses.append(Lead.domain == domain)
    if phone:
        clauses.append(Lead.phone == phone)
    return clauses


def find_existing_lead(session, place_id=None, domain=None, phone=None) -> Optional[Lead]:
    """
    Return the stored Lead matching any identity key, or None.

    Several rows can match when keys disagree across sightings (a practice
    changed phone, two places share a website). The most recently updated
    row wins, then the highest id.
    """
    clauses = identity_clauses(place_id, domain, phone)
    if not clauses:
        return None
    return (
        session.query(Lead)
        .filter(or_(*clauses))
        .order_by(Lead.last_seen_at.desc(), Lead.id.desc())
        .first()
    )
