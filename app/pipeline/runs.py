"""
Run lifecycle — submit a places crawl, remember its options, close it out.

The options blob stored at submission is the only source of filtering
parameters once the crawler's completion webhook arrives.
"""
import logging

from app.config import PUBLIC_BASE_URL
from app.pipeline.base import RunOptions
from app.pipeline.targeting import build_places_input
from app.services import apify as apify_service
from app.services import db

logger = logging.getLogger('pipeline.runs')

WEBHOOK_PATH = '/api/apify/webhook'


def webhook_url() -> str:
    return f'{PUBLIC_BASE_URL}{WEBHOOK_PATH}'


def submit_run(options: RunOptions) -> str:
    """Start the places crawler and record the run; returns the external run id."""
    run_input = build_places_input(options)
    run = apify_service.start_places_run(run_input, webhook_url())
    run_id = run['id']

    db.create_run_record(
        run_id=run_id,
        actor_id=apify_service.ACTORS['places'],
        meta=options.to_meta(),
        source='google_places',
        status='pending',
    )
    logger.info("Submitted run %s: location=%r preset=%s max=%d",
                run_id, options.location, options.preset, options.max_results)
    return run_id


def load_run_options(run_id: str) -> RunOptions:
    """Options stored for a run; defaults when the run was never recorded here."""
    meta = db.get_run_meta(run_id) if run_id else None
    if meta is None:
        logger.warning("No run record for %s — using default options", run_id)
    return RunOptions.from_meta(meta)


def complete_run(run_id: str, status: str = 'succeeded') -> bool:
    """Mark the run terminal (once). Returns whether the status changed."""
    changed = db.finish_run_record(run_id, status)
    if changed:
        logger.info("Run %s marked %s", run_id, status)
    else:
        logger.info("Run %s not updated (current status: %s)", run_id, db.get_run_status(run_id))
    return changed
