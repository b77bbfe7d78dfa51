"""Error handlers for the application. Every error is answered with JSON."""
from http import HTTPStatus

from flask import jsonify
from werkzeug.exceptions import HTTPException

from backend_resources.core.exceptions import ApplicationError, ValidationError


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(ValidationError)
    def validation_failed(error):
        """Field -> message mapping, always 400."""
        return jsonify(error.errors), 400

    @app.errorhandler(ApplicationError)
    def application_error(error):
        """Identity provider fault on the create flow, answered with its status."""
        status = error.http_status if 400 <= error.http_status < 600 else 500
        return jsonify({"error": _reason(status), "message": error.message}), status

    @app.errorhandler(HTTPException)
    def http_error(error):
        """abort() and routing errors."""
        response = jsonify({"error": error.name, "message": error.description})
        response.status_code = error.code or 500
        if error.code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions, including unwrapped Keycloak faults."""
        if isinstance(error, HTTPException):
            return http_error(error)

        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500
