"""Error handlers for the application."""
from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from directorio.core.envelope import ApiResponse

# Views under these prefixes always answer with the 200 envelope
ENVELOPE_PATH_PREFIXES = ("/Login/", "/Usuario/")


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "Bad Request", "message": _description(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        return jsonify({"error": "Method Not Allowed", "message": _description(error)}), 405

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        app.logger.error(f"Internal error: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        # ALWAYS log the error (even in production) - logs are secure
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)

        if _is_envelope_path():
            resp = ApiResponse.from_exception(error)
            return jsonify(resp.to_dict()), 200

        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500


def _description(error) -> str:
    return getattr(error, "description", None) or str(error)


def _is_envelope_path() -> bool:
    """Check if the failing request targets a business endpoint."""
    return request.path.startswith(ENVELOPE_PATH_PREFIXES)
