"""
Lead generation routes — submit a places crawl for a location.
"""
import logging
from flask import Blueprint, request, jsonify

from app.pipeline.base import RunOptions, OptionsError
from app.pipeline.runs import submit_run

logger = logging.getLogger(__name__)

bp = Blueprint('leads', __name__)


@bp.route('/api/generate', methods=['POST'])
def generate():
    """Start a crawl; enrichment happens later when the crawler calls the webhook."""
    try:
        options = RunOptions.from_request(request.get_json(silent=True))
    except OptionsError as e:
        return jsonify({'error': str(e)}), 400

    try:
        run_id = submit_run(options)
        return jsonify({'ok': True, 'runId': run_id})
    except Exception as e:
        logger.error("Run submission failed: %s", e, exc_info=True)
        return jsonify({'error': str(e)}), 500
