"""
Flask application factory.

Creates and configures the Flask app, loads the filter definition corpus and
registers all blueprints.
"""
import importlib

from flask import Flask


def create_app(filters_dir=None):
    """
    Create and configure the Flask application.

    The definition corpus is loaded here, once. A malformed definition aborts
    startup with MalformedDefinition rather than serving a partial corpus.
    """
    from filterlists.config import FILTERS_DIR, SECRET_KEY
    from filterlists.logging_config import configure_logging
    from filterlists.filters.corpus import FilterCorpus
    from filterlists.services.pipeline import build_pipeline

    app = Flask(__name__)

    configure_logging(app)

    # Sessions carry the authenticated user id set by the auth provider
    app.secret_key = SECRET_KEY

    corpus = FilterCorpus.load(filters_dir or FILTERS_DIR)

    from filterlists.extensions import redis_client
    app.extensions['filterlists'] = build_pipeline(corpus, redis_client)

    # Register blueprints
    from filterlists.routes.lists import bp as lists_bp
    from filterlists.routes.health import bp as health_bp

    app.register_blueprint(lists_bp)
    app.register_blueprint(health_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    # Schema is managed by Alembic — no create_all() call.
    importlib.import_module('filterlists.models.filter_list')
    importlib.import_module('filterlists.models.filter_instance')
    importlib.import_module('filterlists.models.user_ban')

    return app
