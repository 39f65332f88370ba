"""
Centralized configuration — env vars, actor ids, pipeline knobs.
"""
import os


def _flag(name, default):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')
LOG_REQUESTS = _flag('LOG_REQUESTS', 'true')

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# Store writes: attempts per write (1 = no retry) and backoff base
STORE_WRITE_RETRIES = int(os.getenv('STORE_WRITE_RETRIES', '3'))
STORE_RETRY_BASE_SECONDS = float(os.getenv('STORE_RETRY_BASE_SECONDS', '0.4'))

# ── Apify ─────────────────────────────────────────────────────────────────────
APIFY_API_TOKEN = os.getenv('APIFY_API_TOKEN')
APIFY_PLACES_ACTOR = os.getenv('APIFY_PLACES_ACTOR', 'compass/crawler-google-places')
APIFY_RAG_ACTOR = os.getenv('APIFY_RAG_ACTOR', 'apify/rag-web-browser')
APIFY_DEEP_CONTACTS_ACTOR = os.getenv('APIFY_DEEP_CONTACTS_ACTOR', 'peterasorensen/snacci')
DATASET_ITEM_LIMIT = int(os.getenv('DATASET_ITEM_LIMIT', '1000'))

# Public URL the crawler calls back on
PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL', '').rstrip('/')

# ── Anthropic ─────────────────────────────────────────────────────────────────
ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY')
CLASSIFIER_MODEL = os.getenv('CLASSIFIER_MODEL', 'claude-haiku-4-5-20251001')
CLASSIFIER_ESCALATION_MODEL = os.getenv('CLASSIFIER_ESCALATION_MODEL', 'claude-sonnet-4-5-20250929')
CLASSIFIER_INPUT_MAX_CHARS = int(os.getenv('CLASSIFIER_INPUT_MAX_CHARS', '2000'))

# ── Enrichment pipeline ───────────────────────────────────────────────────────
DISPATCH_CONCURRENCY = int(os.getenv('DISPATCH_CONCURRENCY', '3'))
SITE_FETCH_TIMEOUT = float(os.getenv('SITE_FETCH_TIMEOUT', '12'))
SITE_TEXT_MAX_CHARS = int(os.getenv('SITE_TEXT_MAX_CHARS', '15000'))
TECH_EXCERPT_MAX_CHARS = int(os.getenv('TECH_EXCERPT_MAX_CHARS', '1500'))
DEEP_CONTACTS_ENABLED = _flag('DEEP_CONTACTS_ENABLED', 'true')
WEBHOOK_JOB_TIMEOUT = int(os.getenv('WEBHOOK_JOB_TIMEOUT', '14400'))

# ── Specialty boost policy (classifier specialties → score boost) ────────────
SPECIALTY_BOOST_PRIMARY = tuple(
    s.strip().lower()
    for s in os.getenv('SPECIALTY_BOOST_PRIMARY', 'cosmetic,aligners').split(',')
    if s.strip()
)
SPECIALTY_BOOST_PRIMARY_VALUE = int(os.getenv('SPECIALTY_BOOST_PRIMARY_VALUE', '60'))
SPECIALTY_BOOST_ANY_VALUE = int(os.getenv('SPECIALTY_BOOST_ANY_VALUE', '40'))

# ── Run status values ─────────────────────────────────────────────────────────
RUN_STATUSES = [
    'pending',
    'succeeded',
    'failed',
]
TERMINAL_RUN_STATUSES = ('succeeded', 'failed')

# ── Lead event types ──────────────────────────────────────────────────────────
LEAD_EVENT_TYPES = [
    'created',
    'rescored',
    'contacts_found',
]
