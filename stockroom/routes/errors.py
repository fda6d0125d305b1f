from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from stockroom.errors import ValidationError

bp = Blueprint("errors", __name__)


@bp.app_errorhandler(ValidationError)
def handle_validation_error(error: ValidationError):
    payload = {"error": str(error)}
    if error.field:
        payload["field"] = error.field
    return jsonify(payload), 400


@bp.app_errorhandler(Exception)
def handle_exception(error: Exception):
    # Allow HTTP errors that are not 500 to propagate to their default handlers.
    if isinstance(error, HTTPException) and error.code != 500:
        return error

    current_app.logger.exception("Unhandled exception", exc_info=error)

    error_message = "Internal Server Error"
    if isinstance(error, HTTPException) and error.description:
        error_message = error.description

    return (
        jsonify(
            {
                "error": error_message,
                "endpoint": request.endpoint,
                "path": request.path,
            }
        ),
        500,
    )
