from flask import jsonify
from werkzeug.exceptions import HTTPException

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"


class LibraryError(Exception):
    status_code = 500
    message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(LibraryError):
    """A required field is missing or malformed."""
    status_code = 400


class NotFound(LibraryError):
    """A referenced record does not exist."""
    status_code = 404


class Conflict(LibraryError):
    """The request breaks a business rule (unavailable book, loan limit, ...)."""
    status_code = 400


def register_error_handlers(app):
    @app.errorhandler(LibraryError)
    def _library_error(err: LibraryError):
        app.logger.info("request rejected (%s): %s", err.status_code, err.message)
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"error": err.description}), err.code

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        # detail stays in the server log
        app.logger.exception("unhandled error: %s", err)
        return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500
