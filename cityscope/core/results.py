# cityscope/core/results.py
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from flask import jsonify

from cityscope.core.errors import CityScopeError, InternalError, STATUS_BY_ERROR_CODE

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """
    Uniform outcome of every service operation.

    Services never raise domain errors to their caller; they return a result
    whose ``error`` holds the short taxonomy code. The API layer turns it into
    the JSON envelope ``{success, message, data?, error?, details?}``.
    """
    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    status_code: int = 200

    @classmethod
    def ok(cls, message: str, data: Optional[Dict[str, Any]] = None, status_code: int = 200) -> "ServiceResult":
        return cls(success=True, message=message, data=data, status_code=status_code)

    @classmethod
    def fail(cls, err: CityScopeError, details: Optional[Dict[str, Any]] = None) -> "ServiceResult":
        return cls(
            success=False,
            message=err.message,
            error=err.error_code,
            details=details,
            status_code=STATUS_BY_ERROR_CODE.get(err.error_code, err.status_code)
        )

    @classmethod
    def internal(cls, context: str) -> "ServiceResult":
        """Logs the active exception and returns a result without internal detail."""
        logger.error(f"{context}", exc_info=True)
        return cls.fail(InternalError("Internal server error"))

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            body["data"] = self.data
        if self.error is not None:
            body["error"] = self.error
        if self.details is not None:
            body["details"] = self.details
        return body

    def to_response(self):
        return jsonify(self.to_dict()), self.status_code
