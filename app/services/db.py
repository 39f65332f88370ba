"""
Store helpers — lead upsert, tech analysis, scores, audit events, run records.

Each helper opens its own session and commits on its own; nothing spans the
whole enrichment sequence, so a crash mid-item leaves a partially enriched
lead that the next run repairs. Writes go through with_retry(): transient
connection errors are retried with exponential backoff, anything else (and
the last transient failure) propagates to the caller.
"""
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Tuple, List

from sqlalchemy import func
from sqlalchemy.exc import OperationalError, InterfaceError, DisconnectionError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app import config
from app.database import get_session
from app.models.lead import Lead
from app.models.tech_analysis import TechAnalysis
from app.models.lead_run import LeadRun
from app.models.lead_event import LeadEvent
from app.pipeline.identity import domain_from_url, find_existing_lead

logger = logging.getLogger('services.db')

_TRANSIENT_ERRORS = (
    OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError,
    ConnectionError, TimeoutError,
)

# Serializes find-then-insert across dispatcher threads in this process
_upsert_lock = threading.Lock()

LEAD_FIELDS = (
    'google_place_id', 'name', 'address', 'city', 'state', 'postal_code',
    'latitude', 'longitude', 'phone', 'website', 'email', 'rating',
    'review_count', 'categories', 'opening_hours',
    'temporarily_closed', 'permanently_closed',
)

TECH_FIELDS = (
    'technologies',
    'has_online_scheduling', 'has_patient_portal', 'has_text_reminders',
    'has_digital_forms', 'has_online_payments', 'has_virtual_consults',
    'has_advanced_imaging',
    'website_text_excerpt', 'llm_specialties', 'llm_notes',
)

SCORE_FIELDS = (
    'tech_score', 'tech_tier', 'investment_level', 'qualification_status',
    'final_score', 'final_score_explanation',
)


# ── Retry ────────────────────────────────────────────────────────────────────

def is_transient(error: Exception) -> bool:
    return isinstance(error, _TRANSIENT_ERRORS)


def with_retry(fn, attempts: int = None, base_seconds: float = None):
    """
    Call fn(), retrying transient errors with exponential backoff.

    attempts defaults to STORE_WRITE_RETRIES (1 disables retrying).
    """
    attempts = max(1, attempts if attempts is not None else config.STORE_WRITE_RETRIES)
    base_seconds = base_seconds if base_seconds is not None else config.STORE_RETRY_BASE_SECONDS
    for attempt in range(attempts):
        try:
            return fn()
        except Exception as e:
            if not is_transient(e) or attempt == attempts - 1:
                raise
            wait = base_seconds * (2 ** attempt)
            logger.warning("Transient store error (attempt %d/%d), retrying in %.2fs: %s",
                           attempt + 1, attempts, wait, e)
            time.sleep(wait)


def _write(work):
    """Run work(session) in its own committed transaction, with retries."""
    def _attempt():
        session = get_session()
        try:
            result = work(session)
            session.commit()
            return result
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
    return with_retry(_attempt)


def _read(work):
    session = get_session()
    try:
        return work(session)
    finally:
        session.close()


def _row_dict(row, fields) -> Dict[str, Any]:
    return {f: getattr(row, f) for f in fields}


# ── Leads ────────────────────────────────────────────────────────────────────

def upsert_lead(base: Dict[str, Any]) -> int:
    """
    Insert a lead or update the stored row it matches; returns the lead id.

    Incoming None values never erase stored data. Upserts are serialized
    within the process so concurrent workers cannot both insert the same
    business; separate worker processes are not coordinated.
    """
    domain = domain_from_url(base.get('website'))

    def _work(session):
        lead = find_existing_lead(
            session,
            place_id=base.get('google_place_id'),
            domain=domain,
            phone=base.get('phone'),
        )
        if lead is None:
            lead = Lead(domain=domain, **{f: base.get(f) for f in LEAD_FIELDS})
            lead.categories = lead.categories or []
            lead.opening_hours = lead.opening_hours or {}
            lead.temporarily_closed = bool(lead.temporarily_closed)
            lead.permanently_closed = bool(lead.permanently_closed)
            session.add(lead)
            session.flush()
            logger.debug("Inserted lead %s (%s)", lead.id, lead.name)
        else:
            for f in LEAD_FIELDS:
                value = base.get(f)
                if value is not None:
                    setattr(lead, f, value)
            if domain:
                lead.domain = domain
            lead.last_seen_at = datetime.now(timezone.utc)
            logger.debug("Updated lead %s (%s)", lead.id, lead.name)
        return lead.id

    with _upsert_lock:
        return _write(_work)


def save_tech_analysis(lead_id: int, analysis: Dict[str, Any]):
    """Insert or update the single TechAnalysis row for a lead."""
    def _work(session):
        row = session.query(TechAnalysis).filter_by(lead_id=lead_id).first()
        if row is None:
            row = TechAnalysis(lead_id=lead_id)
            session.add(row)
        for f in TECH_FIELDS:
            if f in analysis:
                setattr(row, f, analysis[f])

    _write(_work)


def get_scoring_inputs(lead_id: int) -> Tuple[Optional[Dict], Optional[Dict]]:
    """(lead fields, tech analysis fields) for rescoring; either may be None."""
    def _work(session):
        lead = session.get(Lead, lead_id)
        tech = session.query(TechAnalysis).filter_by(lead_id=lead_id).first()
        return (
            _row_dict(lead, ('id', 'name', 'rating', 'review_count')) if lead else None,
            _row_dict(tech, TECH_FIELDS) if tech else None,
        )
    return _read(_work)


def update_lead_score(lead_id: int, score: Dict[str, Any]):
    def _work(session):
        lead = session.get(Lead, lead_id)
        if lead is None:
            raise LookupError(f"Lead {lead_id} not found")
        for f in SCORE_FIELDS:
            if f in score:
                setattr(lead, f, score[f])

    _write(_work)


def list_lead_ids(limit: int = None) -> List[int]:
    def _work(session):
        query = session.query(Lead.id).order_by(Lead.id)
        if limit:
            query = query.limit(limit)
        return [row.id for row in query.all()]
    return _read(_work)


# ── Events ───────────────────────────────────────────────────────────────────

def record_event(lead_id: int, event_type: str, payload: Dict[str, Any] = None):
    """Append an audit event. Events are never updated."""
    if event_type not in config.LEAD_EVENT_TYPES:
        raise ValueError(f"Unknown lead event type: {event_type}")

    def _work(session):
        session.add(LeadEvent(lead_id=lead_id, event_type=event_type, payload=payload or {}))

    _write(_work)


# ── Run records ──────────────────────────────────────────────────────────────

def create_run_record(run_id: str, actor_id: str, meta: Dict[str, Any],
                      source: str = 'google_places', status: str = 'pending'):
    if status not in config.RUN_STATUSES:
        raise ValueError(f"Unknown run status: {status}")

    def _work(session):
        session.add(LeadRun(source=source, actor_id=actor_id, run_id=run_id,
                            status=status, meta=meta))

    _write(_work)


def get_run_meta(run_id: str) -> Optional[Dict[str, Any]]:
    """Stored options blob for a run, or None when the run is unknown."""
    def _work(session):
        row = session.query(LeadRun).filter_by(run_id=run_id).first()
        return dict(row.meta or {}) if row else None
    return _read(_work)


def get_run_status(run_id: str) -> Optional[str]:
    def _work(session):
        row = session.query(LeadRun).filter_by(run_id=run_id).first()
        return row.status if row else None
    return _read(_work)


def finish_run_record(run_id: str, status: str) -> bool:
    """
    Move a run to a terminal status and stamp finished_at.

    Returns False when the run is unknown or already terminal (repeated
    webhook deliveries leave the first outcome in place).
    """
    if status not in config.TERMINAL_RUN_STATUSES:
        raise ValueError(f"Not a terminal run status: {status}")

    def _work(session):
        row = session.query(LeadRun).filter_by(run_id=run_id).first()
        if row is None or row.status in config.TERMINAL_RUN_STATUSES:
            return False
        row.status = status
        row.finished_at = datetime.now(timezone.utc)
        return True

    return _write(_work)


# ── Diagnostics ──────────────────────────────────────────────────────────────

def ping_store() -> Dict[str, Any]:
    """Connectivity check for /api/debug/connections; never raises."""
    status = {'ok': False, 'count': None, 'error': None}
    try:
        def _work(session):
            return session.query(func.count(Lead.id)).scalar()
        status['count'] = _read(_work) or 0
        status['ok'] = True
    except Exception as e:
        status['error'] = {'message': str(e)[:200], 'type': type(e).__name__}
    return status
