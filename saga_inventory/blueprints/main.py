"""Main blueprint with index and health check endpoints."""
from flask import Blueprint, current_app, jsonify
from saga_inventory.database import check_connection

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Entry point opened by the desktop launcher."""
    return jsonify({
        'name': 'Saga Inventory',
        'desktop_mode': current_app.config.get('DESKTOP_MODE', False),
        'resources': ['suppliers', 'customers', 'sellers', 'products', 'sales'],
    })


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    if check_connection():
        return jsonify({
            'status': 'healthy',
            'database': 'connected',
            'message': 'Database connection successful'
        }), 200

    return jsonify({
        'status': 'unhealthy',
        'database': 'error',
        'message': 'Database connection failed'
    }), 500
