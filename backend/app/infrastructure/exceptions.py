"""
Custom Exceptions for the Admission Probability Engine

Hierarchical exception classes for proper error handling across layers.
Only malformed requests and truly missing subjects (profile/school) raise;
missing sub-fields degrade confidence instead.
"""

from typing import Optional, Dict, Any


class AdmissionEngineError(Exception):
    """Base exception for all admission engine errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(AdmissionEngineError):
    """Raised when input validation fails."""
    pass


class InputValidationError(ValidationError):
    """Raised for malformed or oversized prediction requests."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if field:
            details["field"] = field
        super().__init__(message, details, original_error)


class DatabaseError(AdmissionEngineError):
    """Raised when data store operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class DataUnavailableError(NotFoundError):
    """
    Raised when the subject of a prediction (profile or school) is missing.

    Fails the whole batch: nothing can be scored without the subject.
    """

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, operation="read", table=resource, original_error=original_error)
        if resource_id:
            self.details["id"] = resource_id


class CacheUnavailableError(AdmissionEngineError):
    """Raised by cache backends when the store cannot be reached."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if key:
            details["key"] = key
        super().__init__(message, details, original_error)


class ConfigurationError(AdmissionEngineError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
