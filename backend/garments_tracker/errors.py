# Overview: Error taxonomy shared by services and routes, plus the JSON error boundary.

"""
API Error Taxonomy

Every error a handler can surface maps to one class here. Services raise
them; routes either let them propagate to the registered handlers or, where
the HTTP contract is lenient (missing ids on reads and mutations), translate
them into an empty or zero-affected result.

Response shape:
    {"error": "<human message>", "code": "<MACHINE_CODE>", ...details}

The catch-all handler guarantees a generic 500 for anything unexpected; the
full traceback only goes to the server log.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException


class APIError(Exception):
    """Base for errors that render as a structured JSON response."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None, *, code: str | None = None, details: dict | None = None):
        self.message = message or self.default_message()
        if code is not None:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def default_message(self) -> str:
        return "Internal server error"

    def to_dict(self) -> dict[str, Any]:
        body = {"error": self.message, "code": self.code}
        body.update(self.details)
        return body


class ValidationError(APIError):
    """400: missing or malformed request fields."""
    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidIdError(APIError):
    """400: identifier is not well-formed; raised before any store access."""
    status_code = 400
    code = "INVALID_ID"

    def default_message(self) -> str:
        return "Invalid id"


class UnauthorizedError(APIError):
    """401: missing, malformed, invalid or expired bearer token."""
    status_code = 401
    code = "UNAUTHORIZED"

    def default_message(self) -> str:
        return "unauthorized access"


class ForbiddenError(APIError):
    """403: authenticated, but the access policy denied the action."""
    status_code = 403
    code = "FORBIDDEN"

    def default_message(self) -> str:
        return "forbidden access"


class NotFoundError(APIError):
    status_code = 404
    code = "NOT_FOUND"

    def default_message(self) -> str:
        return "Not found"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"

    def default_message(self) -> str:
        return "Order not found"


class ProductNotFoundError(NotFoundError):
    code = "PRODUCT_NOT_FOUND"

    def default_message(self) -> str:
        return "Product not found"


class AccountNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"

    def default_message(self) -> str:
        return "User not found"


class ConflictError(APIError):
    """409: request conflicts with the record's current state."""
    status_code = 409
    code = "CONFLICT"


class UpstreamError(APIError):
    """500: a call to an external provider failed. Message must be safe to show."""
    status_code = 500
    code = "UPSTREAM_ERROR"

    def default_message(self) -> str:
        return "Upstream service error"


class InternalError(APIError):
    status_code = 500
    code = "INTERNAL_ERROR"


def register_error_handlers(app: Flask) -> None:
    """Install the JSON error boundary on the application."""

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        if err.status_code >= 500:
            app.logger.error("%s: %s", err.code, err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = (err.name or "error").upper().replace(" ", "_")
        return jsonify({"error": err.description, "code": code}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled error while processing request")
        return jsonify({"error": "Internal server error", "code": InternalError.code}), 500
