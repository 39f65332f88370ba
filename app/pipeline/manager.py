"""
Pipeline manager — webhook ingestion for completed crawl runs.

The webhook route only enqueues process_webhook() on RQ and answers 200. The
RQ worker then resolves the dataset, reloads the run's stored options, fans
the dataset items out through the dispatcher and closes the run. Nothing
raised here reaches the crawler: the HTTP response went out long before.
"""
import logging
from typing import Dict, Any, Optional, Tuple

from app import config
from app.pipeline.base import BatchResult
from app.pipeline.dispatcher import dispatch
from app.pipeline.enrichment import enrich_item
from app.pipeline.runs import load_run_options, complete_run
from app.services import apify as apify_service

logger = logging.getLogger('pipeline.manager')

FAILED_EVENT_TYPES = ('ACTOR.RUN.FAILED', 'ACTOR.RUN.ABORTED', 'ACTOR.RUN.TIMED_OUT')
FAILED_RUN_STATUSES = ('FAILED', 'ABORTED', 'TIMED-OUT', 'TIMED_OUT')


# ── Lazy RQ queue (no Redis connection at import time) ────────────────────

_queue = None


def _get_queue():
    global _queue
    if _queue is None:
        from app.extensions import redis_client
        from rq import Queue
        _queue = Queue(connection=redis_client)
    return _queue


def enqueue_webhook(payload: Dict[str, Any]):
    """Hand a webhook payload to the background worker."""
    return _get_queue().enqueue(process_webhook, payload, job_timeout=config.WEBHOOK_JOB_TIMEOUT)


# ── Payload resolution ────────────────────────────────────────────────────

def _dig(payload, *path):
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def resolve_identifiers(payload: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """(run id, dataset id) from the known webhook payload shapes."""
    payload = payload if isinstance(payload, dict) else {}
    dataset_raw = (
        _dig(payload, 'resource', 'defaultDatasetId')
        or payload.get('defaultDatasetId')
        or payload.get('datasetId')
    )
    dataset_id = str(dataset_raw).rstrip('/').split('/')[-1] if dataset_raw else None
    run_id = (
        _dig(payload, 'resource', 'id')
        or _dig(payload, 'eventData', 'actorRunId')
        or payload.get('id')
    )
    return (str(run_id) if run_id else None), (dataset_id or None)


def terminal_status(payload: Dict[str, Any]) -> str:
    """'failed' when the crawler reports a failed/aborted/timed-out run, else 'succeeded'."""
    payload = payload if isinstance(payload, dict) else {}
    event_type = str(payload.get('eventType') or '').upper()
    run_status = str(_dig(payload, 'resource', 'status') or '').upper()
    if event_type in FAILED_EVENT_TYPES or run_status in FAILED_RUN_STATUSES:
        return 'failed'
    return 'succeeded'


def resolve_dataset_id(run_id: Optional[str], dataset_id: Optional[str]) -> Optional[str]:
    """Dataset id from the payload, else from the run looked up on Apify."""
    if dataset_id:
        return dataset_id
    if not run_id:
        return None
    run = apify_service.get_run(run_id)
    return (run or {}).get('defaultDatasetId') or None


# ── Worker entry point ────────────────────────────────────────────────────

def process_dataset(run_id: Optional[str], dataset_id: str) -> BatchResult:
    """Enrich every item of a crawl dataset with the run's stored options."""
    items = apify_service.list_dataset_items(dataset_id)
    logger.info("Run %s dataset %s: %d items", run_id, dataset_id, len(items))

    options = load_run_options(run_id)
    context = {'run_id': run_id, 'dataset_id': dataset_id}

    def _worker(item, _idx):
        return enrich_item(item, options, context)

    return dispatch(items, _worker, concurrency=config.DISPATCH_CONCURRENCY)


def _fail_run(run_id: Optional[str]):
    """Close a run as failed after a processing error; store errors are only logged."""
    if not run_id:
        return
    try:
        complete_run(run_id, 'failed')
    except Exception as e:
        logger.error("Could not mark run %s failed: %s", run_id, e)


def process_webhook(payload: Dict[str, Any]) -> Optional[BatchResult]:
    """Background job: resolve, enrich, close the run. Logs instead of raising."""
    run_id = None
    try:
        run_id, dataset_id = resolve_identifiers(payload)
        if not run_id and not dataset_id:
            logger.warning("Webhook has no run id or dataset id — ignoring")
            return None

        dataset_id = resolve_dataset_id(run_id, dataset_id)
        if not dataset_id:
            logger.warning("Webhook for run %s: unable to resolve dataset id", run_id)
            _fail_run(run_id)
            return None
        logger.info("Webhook resolved run=%s dataset=%s", run_id, dataset_id)

        result = process_dataset(run_id, dataset_id)

        if run_id:
            complete_run(run_id, terminal_status(payload))
        return result
    except Exception:
        logger.error("Webhook processing failed (run %s)", run_id, exc_info=True)
        _fail_run(run_id)
        return None
