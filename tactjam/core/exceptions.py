# tactjam/core/exceptions.py
"""
Custom exceptions for the application.

Every error carries the HTTP status it is surfaced with; the API layer
turns them into responses in one place (see tactjam.main).
"""
from typing import Optional, Dict, Any


class TactJamError(Exception):
    """Base exception for all TactJam errors."""
    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(TactJamError):
    """Malformed or missing input (length, charset, array shape)."""
    status_code = 400


class ConflictError(TactJamError):
    """Uniqueness violation, found by lookup or rejected by the store."""
    status_code = 400

    def __init__(self, message: str, collection: Optional[str] = None, key: Optional[Dict[str, Any]] = None):
        super().__init__(message, {"collection": collection, "key": key or {}})
        self.collection = collection
        self.key = key or {}


class PermissionDeniedError(TactJamError):
    """Acting user is missing, or is neither the owner nor an admin."""
    status_code = 401

    def __init__(self, message: str = "Authentication Error"):
        super().__init__(message)


class NotFoundError(TactJamError):
    """Referenced id does not resolve to exactly one row.

    Not-found and ambiguous are reported the same way.
    """
    status_code = 400

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"Invalid id; no unique {resource} found",
            {"resource": resource, "id": identifier}
        )
        self.resource = resource
        self.identifier = identifier


class DependencyError(TactJamError):
    """Datastore unreachable or returned something unexpected."""
    status_code = 500

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Datastore error during {operation}: {message}",
            {"operation": operation}
        )
        self.operation = operation
