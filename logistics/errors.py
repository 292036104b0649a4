# logistics/errors.py

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError, OperationalError, DisconnectionError


class LogisticsError(Exception):
    """Base class for errors reported back to API callers."""
    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self):
        payload = {'error': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class ValidationError(LogisticsError):
    """Malformed filter or payload (bad date, non-integer id, negative limit)."""
    status_code = 400


class AuthorizationError(LogisticsError):
    """Caller's role or home base does not allow the requested data."""
    status_code = 403


class DataAccessError(LogisticsError):
    """The datastore could not be reached or a query failed."""
    status_code = 503


def register_error_handlers(app):
    """Attach JSON error handlers to the application.

    Args:
        app: Flask application instance
    """
    @app.errorhandler(LogisticsError)
    def handle_logistics_error(error):
        if error.status_code >= 500:
            app.logger.error(f'{type(error).__name__}: {error.message}')
        elif isinstance(error, AuthorizationError):
            app.logger.warning(f'Access denied: {error.message}')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        from logistics.extensions import db

        app.logger.error(f'Database error occurred: {str(error)}')
        db.session.rollback()
        if isinstance(error, OperationalError):
            return jsonify({'error': 'Database connection error. Please try again later.'}), 503
        elif isinstance(error, DisconnectionError):
            db.session.remove()  # Clean up the session
            return jsonify({'error': 'Lost connection to database. Please refresh the page.'}), 500
        return jsonify({'error': 'An unexpected database error occurred.'}), 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(429)
    def handle_rate_limited(error):
        return jsonify({'error': f'Rate limit exceeded: {error.description}'}), 429
