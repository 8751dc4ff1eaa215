import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class CampusBinsError(Exception):
    """Base class for failures the API reports back to the caller."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'success': False, 'error': self.message}


class ValidationError(CampusBinsError):
    """Malformed or missing input. Raised before anything is written."""

    status_code = 400


class NotFoundError(CampusBinsError):
    """A referenced bin, alert, staff member or location does not exist."""

    status_code = 404


class PersistenceError(CampusBinsError):
    """The store is unavailable or rejected a write."""

    status_code = 500


def register_error_handlers(app, db):
    @app.errorhandler(CampusBinsError)
    def handle_campus_bins_error(e):
        if e.status_code >= 500:
            logger.error(f"Persistence failure: {e.message}")
        else:
            logger.warning(f"Request rejected ({e.status_code}): {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Endpoint not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle all unhandled exceptions"""
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'error': e.description}), e.code
        logger.exception(f"Unhandled exception: {e}")
        db.session.rollback()
        return jsonify({'success': False, 'error': 'Internal server error'}), 500
