"""
Apify actor calls — places crawl submission, run/dataset lookups, website
markdown extraction and deep contact scraping.

Every call goes through the 'apify' circuit breaker. Callers decide whether a
failure is fatal (submission) or best-effort (enrichment).
"""
import logging
from typing import Dict, List, Any, Optional, Tuple

from app.config import (
    APIFY_PLACES_ACTOR, APIFY_RAG_ACTOR, APIFY_DEEP_CONTACTS_ACTOR,
    DATASET_ITEM_LIMIT, SITE_TEXT_MAX_CHARS,
)
from app.extensions import apify_client as client

logger = logging.getLogger('services.apify')

ACTORS = {
    'places': APIFY_PLACES_ACTOR,
    'rag': APIFY_RAG_ACTOR,
    'deep': APIFY_DEEP_CONTACTS_ACTOR,
}

WEBHOOK_EVENT_TYPES = [
    'ACTOR.RUN.SUCCEEDED',
    'ACTOR.RUN.FAILED',
    'ACTOR.RUN.ABORTED',
    'ACTOR.RUN.TIMED_OUT',
]


def _call(func, *args, **kwargs):
    """Route an Apify client call through the circuit breaker."""
    from app.services.circuit_breaker import get_breaker
    if client is None:
        raise RuntimeError("APIFY_API_TOKEN not set")
    return get_breaker('apify').call(func, *args, **kwargs)


def start_places_run(run_input: Dict[str, Any], webhook_url: str) -> Dict[str, Any]:
    """Start the places crawler without waiting; completion arrives via webhook."""
    webhooks = [{'event_types': WEBHOOK_EVENT_TYPES, 'request_url': webhook_url}]

    def _start():
        return client.actor(ACTORS['places']).start(run_input=run_input, webhooks=webhooks)
    return _call(_start)


def get_run(run_id: str) -> Optional[Dict[str, Any]]:
    def _get():
        return client.run(run_id).get()
    return _call(_get)


def list_dataset_items(dataset_id: str, limit: int = DATASET_ITEM_LIMIT) -> List[Dict[str, Any]]:
    def _fetch():
        return list(client.dataset(dataset_id).iterate_items(limit=limit))
    return _call(_fetch)


def run_actor_and_get_items(actor_id: str, run_input: Dict[str, Any],
                            timeout_secs: int = 120) -> Tuple[Dict, List[Dict]]:
    """Run an actor to completion and return (run, dataset items)."""
    def _run():
        run = client.actor(actor_id).call(run_input=run_input, timeout_secs=timeout_secs)
        if not run:
            raise RuntimeError(f"Actor {actor_id} returned no run")
        items = list(client.dataset(run['defaultDatasetId']).iterate_items(limit=DATASET_ITEM_LIMIT))
        return run, items
    return _call(_run)


def fetch_website_markdown(url: str) -> str:
    """
    Extract a page as markdown with the RAG web browser actor.

    Raises when the actor fails or yields no markdown so the caller can fall
    back to a direct fetch.
    """
    run_input = {
        'query': url,
        'outputFormats': ['markdown'],
        'scrapingTool': 'raw-http',
        'requestTimeoutSecs': 40,
    }
    _, items = run_actor_and_get_items(ACTORS['rag'], run_input)
    first = next((i for i in items if i and i.get('markdown')), items[0] if items else {})
    text = str(first.get('markdown') or '')[:SITE_TEXT_MAX_CHARS]
    if not text:
        raise ValueError("RAG actor returned no markdown")
    return text


def scrape_contacts(url: str) -> List[Dict[str, Any]]:
    """Crawl a website (depth 2) for emails, phone numbers and social links."""
    run_input = {
        'websites': [url],
        'scrapeTypes': ['emails', 'phoneNumbers', 'socialMedia'],
        'removeDuplicates': True,
        'maxDepth': 2,
        'maxLinksPerPage': 100,
    }
    _, items = run_actor_and_get_items(ACTORS['deep'], run_input)
    return [i for i in items if isinstance(i, dict)]
