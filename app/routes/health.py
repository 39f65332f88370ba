"""
Health routes — liveness, circuit breaker states, store connectivity.

Nothing here echoes a credential; configuration is reported as presence and length only.
"""
import os
from urllib.parse import urlparse
from flask import Blueprint, jsonify

from app.services.circuit_breaker import get_all_breakers
from app.services.db import ping_store

bp = Blueprint('health', __name__)

_SECRET_ENV = ('APIFY_API_TOKEN', 'ANTHROPIC_API_KEY', 'REDIS_URL')


@bp.route('/api/health')
def api_health():
    services = {name: cb.get_health() for name, cb in get_all_breakers().items()}
    return jsonify({'ok': True, 'services': services})


@bp.route('/api/health/<service>/reset', methods=['POST'])
def reset_circuit(service):
    breaker = get_all_breakers().get(service)
    if breaker is None:
        return jsonify({'error': f'Unknown service: {service}'}), 404
    breaker.reset()
    return jsonify({'ok': True, 'service': service, 'state': breaker.state})


@bp.route('/api/debug/connections')
def debug_connections():
    """Config presence + a live store query."""
    from app.config import PUBLIC_BASE_URL, DATABASE_URL

    env = {
        'publicBaseUrl': PUBLIC_BASE_URL,
        'databaseScheme': urlparse(DATABASE_URL).scheme,
    }
    for name in _SECRET_ENV:
        env[f'{name.lower()}_len'] = len(os.getenv(name, ''))

    return jsonify({'ok': True, 'env': env, 'store': ping_store()})
