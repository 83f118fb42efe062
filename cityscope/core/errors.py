# cityscope/core/errors.py
"""
Domain error taxonomy.

Each error carries the short code that ends up in the ``error`` field of a
response envelope and the HTTP status the API layer answers with.
"""


class CityScopeError(Exception):
    error_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Something went wrong"):
        super().__init__(message)
        self.message = message


class ValidationError(CityScopeError):
    """Malformed or out-of-range input (content length, enum membership, id format)."""
    error_code = "VALIDATION_ERROR"
    status_code = 400


class MediaUploadError(ValidationError):
    error_code = "UPLOAD_FAILED"


class UnauthorizedError(CityScopeError):
    error_code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(CityScopeError):
    """The acting user or the target is inactive, or lacks ownership."""
    error_code = "FORBIDDEN"
    status_code = 403


class NotFoundError(CityScopeError):
    error_code = "NOT_FOUND"
    status_code = 404


class ConflictError(CityScopeError):
    """Unique constraint violation, e.g. an email that is already registered."""
    error_code = "CONFLICT"
    status_code = 409


class InternalError(CityScopeError):
    pass


STATUS_BY_ERROR_CODE = {
    cls.error_code: cls.status_code
    for cls in (ValidationError, MediaUploadError, UnauthorizedError, ForbiddenError,
                NotFoundError, ConflictError, InternalError)
}
