import logging

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError

from utils.exceptions import AppError, StorageError, StorageFailure

logger = logging.getLogger(__name__)

HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "VALIDATION_ERROR",
}


def error_response(error: str, code: str, status: int, details: dict | None = None):
    payload = {"error": error, "code": code, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Session core errors carry their own status and message
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if err.status >= 500:
            logger.exception("Request failed", exc_info=err)
        return error_response(err.message, err.code, err.status)

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("Invalid input", "VALIDATION_ERROR", 422, details=err.messages)

    # Store failures: logged here, never echoed to the caller
    @app.errorhandler(StorageError)
    def handle_storage_error(err: StorageError):
        logger.exception("Storage failure", exc_info=err)
        failure = StorageFailure()
        return error_response(failure.message, failure.code, failure.status)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(err.description, HTTP_CODES.get(status, "HTTP_ERROR"), status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__}
        return error_response("An unexpected error occurred", "INTERNAL_ERROR", 500, details=details)
