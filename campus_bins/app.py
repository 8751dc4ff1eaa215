import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from .api import api
from .config import get_config
from .errors import register_error_handlers
from .models import db
from .seed import initialize_database, reset_db_command

logger = logging.getLogger(__name__)

ENDPOINTS = {
    'bins': 'GET /api/bins',
    'bin': 'GET /api/bins/<id>',
    'alerts': 'GET /api/alerts?status=&min_level=',
    'raiseAlert': 'POST /api/alerts',
    'resolveAlert': 'PUT /api/alerts/<id>',
    'addWaste': 'POST /api/waste',
    'collections': 'GET /api/collections?bin_id=',
    'locations': 'GET /api/locations',
    'staff': 'GET /api/staff',
    'stats': 'GET /api/dashboard/stats',
    'health': 'GET /api/health',
}


def create_app(config=None):
    """Build the Flask app and bind the database handle to it."""
    config = config or get_config()
    app = Flask(__name__)
    app.config.from_object(config)

    logging.basicConfig(level=app.config['LOG_LEVEL'])

    CORS(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    db.init_app(app)
    register_error_handlers(app, db)
    app.register_blueprint(api)
    app.cli.add_command(reset_db_command)

    @app.before_request
    def log_request():
        logger.debug(f"Request: {request.method} {request.url}")

    @app.route('/')
    def index():
        return jsonify({
            'message': 'Campus Bins API',
            'version': '1.0.0',
            'endpoints': ENDPOINTS,
        })

    initialize_database(app)
    logger.info(f"Database ready: {app.config['SQLALCHEMY_DATABASE_URI']}")
    return app


def main():
    """Run the development server (`campus-bins` or `python -m campus_bins.app`)."""
    app = create_app()
    logger.info("Starting Flask server...")
    print("=" * 50)
    print("Campus Bins Server")
    print("=" * 50)
    print("Available endpoints:")
    for route in ENDPOINTS.values():
        print(f"  {route}")
    print("=" * 50)
    app.run(host='0.0.0.0', port=5000)


if __name__ == '__main__':
    main()
