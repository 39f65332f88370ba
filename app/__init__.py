"""
Flask application factory.

Creates and configures the app, registers the lead, webhook and health blueprints.
"""
import logging
from flask import Flask, request


def create_app():
    """Create and configure the Flask application."""
    from app.config import LOG_REQUESTS
    from app.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    if LOG_REQUESTS:
        request_logger = logging.getLogger('app.requests')

        @app.before_request
        def log_request():
            request_logger.info("REQ %s %s", request.method, request.path)

    from app.routes.leads import bp as leads_bp
    from app.routes.webhook import bp as webhook_bp
    from app.routes.health import bp as health_bp

    app.register_blueprint(leads_bp)
    app.register_blueprint(webhook_bp)
    app.register_blueprint(health_bp)

    # Breakers for external services, state shared through Redis
    from app.extensions import redis_client
    from app.services.circuit_breaker import init_breakers
    init_breakers(redis_client)

    # Import models so Base.metadata knows about them.
    # Schema is managed by Alembic, no create_all() here.
    import importlib
    importlib.import_module('app.models.lead')
    importlib.import_module('app.models.tech_analysis')
    importlib.import_module('app.models.lead_run')
    importlib.import_module('app.models.lead_event')

    return app
