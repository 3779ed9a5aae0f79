# Overview: Maps domain errors to JSON responses and installs the app-wide fallbacks.

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .validation import ConflictError, InsufficientStockError, NotFoundError, ValidationError


def json_error(exc: Exception):
    """
    Shape a domain error raised by a service into (response, status).

    Anything that is not a known domain error is logged and answered with a
    generic 500.
    """
    if isinstance(exc, InsufficientStockError):
        return jsonify(exc.to_dict()), 400
    if isinstance(exc, ValidationError):
        return jsonify({"message": str(exc)}), 400
    if isinstance(exc, ConflictError):
        return jsonify({"message": str(exc)}), exc.status_code
    if isinstance(exc, NotFoundError):
        return jsonify({"message": str(exc)}), 404
    return internal_error(exc)


def internal_error(exc: Exception, message: str = "Internal server error"):
    current_app.logger.error("Unhandled error: %s", exc, exc_info=exc)
    body = {"message": message}
    if current_app.config.get("APP_ENV") == "development":
        body["error"] = str(exc)
    return jsonify(body), 500


def register_error_handlers(app) -> None:
    @app.errorhandler(404)
    def route_not_found(_exc):
        return jsonify({"message": "Route not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return jsonify({"message": "Method not allowed"}), 405

    @app.errorhandler(RequestEntityTooLarge)
    def file_too_large(_exc):
        return jsonify({"message": "File too large. Maximum size is 5MB."}), 400

    @app.errorhandler(Exception)
    def unhandled(exc):
        if isinstance(exc, HTTPException):
            return jsonify({"message": exc.description}), exc.code
        return internal_error(exc)
