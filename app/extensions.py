"""
Shared client instances — Redis, Apify, Anthropic.

Created once at import time and reused by every pipeline call. Missing
credentials leave the client as None so importing this module is always safe
(even when env vars are missing during tests).
"""
import logging
import redis

from app.config import REDIS_URL, APIFY_API_TOKEN, ANTHROPIC_API_KEY

logger = logging.getLogger('app.extensions')

# ── Redis (RQ queue + circuit breaker state) ─────────────────────────────────
redis_client = redis.from_url(REDIS_URL)

# ── Apify ─────────────────────────────────────────────────────────────────────
apify_client = None
if APIFY_API_TOKEN:
    try:
        from apify_client import ApifyClient
        apify_client = ApifyClient(APIFY_API_TOKEN)
        logger.info("Apify client initialized successfully")
    except Exception as e:
        logger.error("Error initializing Apify client: %s", e)
else:
    logger.warning("APIFY_API_TOKEN not set — crawl and extraction actors unavailable")

# ── Anthropic ─────────────────────────────────────────────────────────────────
anthropic_client = None
if ANTHROPIC_API_KEY:
    try:
        from anthropic import Anthropic
        anthropic_client = Anthropic(api_key=ANTHROPIC_API_KEY)
        logger.info("Anthropic client initialized successfully")
    except Exception as e:
        logger.error("Error initializing Anthropic client: %s", e)
else:
    logger.warning("ANTHROPIC_API_KEY not set — specialty classification disabled")
