from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def error_body(error: str, message: str) -> dict:
    return {"success": False, "error": error, "message": message}


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to JSON responses with their HTTP status."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.status_code >= 500:
            logger.error("%s on %s %s: %s", type(e).__name__, request.method, request.path, e)
        return jsonify(error_body(type(e).__name__, str(e))), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify(error_body(e.name, e.description or e.name)), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=e)
        return jsonify(error_body("InternalServerError", "An unexpected error occurred")), 500
