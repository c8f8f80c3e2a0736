"""
Error Service for the JSON API
Domain exceptions raised by the services, and the handlers that turn them
(and anything unexpected) into one response shape:

    {"success": false, "error": {"code", "message", "timestamp", "details"?}}
"""
import logging
import uuid
from datetime import datetime
from typing import Dict, Any, Optional
from flask import request, jsonify, current_app, has_request_context
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ErrorCode:
    """Machine-readable codes carried in error responses"""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorService:
    """Builds error payloads and logs failures under a short tracking id"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def log_error(self, error: Exception, context: Dict[str, Any] = None) -> str:
        """
        Log an unexpected failure with enough request detail to find it again

        Returns:
            Error id, echoed to the client in `details.error_id`
        """
        error_id = uuid.uuid4().hex[:8].upper()

        where = ''
        if has_request_context():
            where = f" during {request.method} {request.path}"

        self.logger.error(
            f"Error {error_id}{where}: {type(error).__name__}: {error} {context or ''}".rstrip(),
            exc_info=error
        )
        return error_id

    def create_error_response(self,
                              error_code: str,
                              message: str,
                              details: Optional[Dict[str, Any]] = None,
                              status_code: int = 400) -> tuple:
        body = {
            'success': False,
            'error': {
                'code': error_code,
                'message': message,
                'timestamp': datetime.utcnow().isoformat()
            }
        }
        if details:
            body['error']['details'] = details
        return jsonify(body), status_code

    def handle_unexpected(self, error: Exception, error_code: str, public_message: str) -> tuple:
        """500 with a tracking id; the raw message is only shown in debug mode"""
        error_id = self.log_error(error, {'code': error_code})
        message = str(error) if current_app.debug else public_message
        return self.create_error_response(error_code, message, {'error_id': error_id}, 500)


# Global error service instance
error_service = ErrorService()


class APIError(Exception):
    """Base for errors the services raise on purpose"""

    def __init__(self, error_code: str, message: str, status_code: int = 400, details: Dict[str, Any] = None):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Input broke a business rule; nothing was written"""

    def __init__(self, message: str, field: str = None):
        details = {'field': field} if field else None
        super().__init__(ErrorCode.VALIDATION_ERROR, message, 400, details)
        self.field = field


class NotFoundError(APIError):

    def __init__(self, resource: str = "Resource", identifier=None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} {identifier} not found"
        super().__init__(ErrorCode.NOT_FOUND, message, 404, {'resource': resource})
        self.resource = resource


class ConflictError(APIError):
    """A concurrent writer won the race; resubmitting against current state is safe"""

    def __init__(self, message: str = "Concurrent update detected, please try again"):
        super().__init__(ErrorCode.CONFLICT, message, 409, {'retriable': True})


class DuplicateEntryError(APIError):
    """A record that may only exist once already does"""

    def __init__(self, message: str):
        super().__init__(ErrorCode.DUPLICATE_ENTRY, message, 409)


def register_error_handlers(app):
    """Register the JSON error handlers on the app"""
    from classbook import db

    @app.errorhandler(APIError)
    def handle_api_error(error):
        db.session.rollback()
        if error.status_code >= 409:
            app.logger.warning(f"{error.error_code}: {error.message}")
        return error_service.create_error_response(
            error.error_code,
            error.message,
            error.details,
            error.status_code
        )

    @app.errorhandler(SQLAlchemyError)
    def handle_sqlalchemy_error(error):
        db.session.rollback()
        return error_service.handle_unexpected(error, ErrorCode.DATABASE_ERROR, "Database operation failed")

    @app.errorhandler(404)
    def not_found_error(error):
        return error_service.create_error_response(
            ErrorCode.NOT_FOUND,
            "Resource not found",
            status_code=404
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error_service.create_error_response(
                error.name.upper().replace(' ', '_'),
                error.description,
                status_code=error.code
            )
        db.session.rollback()
        return error_service.handle_unexpected(error, ErrorCode.INTERNAL_ERROR, "Internal server error")
