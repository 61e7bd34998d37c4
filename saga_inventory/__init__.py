"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from saga_inventory.database import init_db


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
        )
    logging.getLogger('saga_inventory').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    _configure_logging(app)

    # Initialize Sentry for error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Initialize Redis Cache
    from saga_inventory.services.cache_service import init_cache
    init_cache(app)

    # Setup Prometheus metrics instrumentation
    from saga_inventory.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Initialize database
    init_db(app)

    # Error Handlers
    from saga_inventory.exceptions import InventoryError

    @app.errorhandler(InventoryError)
    def handle_inventory_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"InventoryError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"InventoryError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'status': 'error', 'message': error.description}), error.code

        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from saga_inventory.blueprints.main import main_bp
    from saga_inventory.blueprints.api import api_bp
    from saga_inventory.blueprints.metrics import metrics_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from saga_inventory.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(
        f"App ready (env={app.config.get('ENV')}, desktop={app.config.get('DESKTOP_MODE')})"
    )

    return app
