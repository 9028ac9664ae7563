"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``register_error_handlers`` turns them into
``{"message": ...}`` JSON responses with the matching status code.
"""
from __future__ import annotations

from flask import jsonify
from werkzeug.exceptions import HTTPException


class StatusError(Exception):
    status = 500
    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(StatusError):
    status = 400
    default_message = "Bad request"


class ValidationError(BadRequest):
    default_message = "Invalid data"


class InsufficientPoints(BadRequest):
    default_message = "You do not have enough points"


class Unauthenticated(StatusError):
    status = 401
    default_message = "Please authenticate first"


class Unauthorized(StatusError):
    status = 401
    default_message = "Incorrect login data"


class NotFound(StatusError):
    status = 404
    default_message = "Not found"


class Conflict(StatusError):
    status = 409
    default_message = "Conflict"


class Internal(StatusError):
    status = 500
    default_message = "Internal server error"


class Unavailable(StatusError):
    status = 503
    default_message = "Service unavailable"


def register_error_handlers(app) -> None:
    @app.errorhandler(StatusError)
    def _status_error(err: StatusError):
        if isinstance(err, Internal):
            # Log the real cause, answer with the generic message.
            app.logger.error("Internal error: %s", err.message, exc_info=err)
            return jsonify({"message": Internal.default_message}), 500
        return jsonify({"message": err.message}), err.status

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"message": err.description or err.name}), err.code

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        app.logger.exception("Unhandled error: %s", err)
        return jsonify({"message": Internal.default_message}), 500
