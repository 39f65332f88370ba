"""
Webhook routes — crawl completion notifications from Apify.

The POST handler acknowledges immediately and leaves all work to the RQ
worker; the crawler gets a 200 whatever happens afterwards.
"""
import logging
from flask import Blueprint, request, jsonify

from app.pipeline.manager import enqueue_webhook

logger = logging.getLogger(__name__)

bp = Blueprint('webhook', __name__)


@bp.route('/api/apify/webhook', methods=['POST'])
def apify_webhook():
    payload = request.get_json(silent=True) or {}
    try:
        job = enqueue_webhook(payload)
        logger.info("Webhook queued as job %s", getattr(job, 'id', None))
    except Exception as e:
        logger.error("Webhook enqueue failed: %s", e, exc_info=True)
    return jsonify({'received': True}), 200


@bp.route('/api/apify/webhook', methods=['GET'])
def apify_webhook_check():
    """Reachability check for the callback URL."""
    return jsonify({'ok': True, 'method': 'GET'})
