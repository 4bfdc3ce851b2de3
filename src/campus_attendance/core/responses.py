"""JSON response envelope shared by every endpoint.

Shape: ``{"success": bool, "message"?: str, "data"?: object}``.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from .exceptions import DomainError

logger = logging.getLogger(__name__)

_HTTP_MESSAGES = {
    404: "Resource not found",
    405: "Invalid request method",
}


def envelope(success: bool, message: str = "", data: Optional[Any] = None) -> dict:
    body: dict[str, Any] = {"success": success}
    if message:
        body["message"] = message
    if data:
        body["data"] = data
    return body


def success_response(message: str = "", data: Optional[Any] = None, status: int = 200) -> tuple[Response, int]:
    return jsonify(envelope(True, message, data)), status


def error_response(message: str, status: int = 400) -> tuple[Response, int]:
    return jsonify(envelope(False, message)), status


def register_error_handlers(app: Flask) -> None:
    """Map domain and HTTP errors to the envelope.

    Flask picks the handler registered for the most specific exception class,
    so feature controllers can still override a subclass (e.g. session expiry).
    """

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.kind.value, exc.message)
        return error_response(exc.message, exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        status = exc.code or 500
        message = _HTTP_MESSAGES.get(status, exc.description or "Request failed")
        return error_response(message, status)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return error_response("Internal server error", 500)
