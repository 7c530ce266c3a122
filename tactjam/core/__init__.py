# tactjam/core/__init__.py
"""
Core module - configuration, logging and the error taxonomy.
"""
from .config import settings
from .exceptions import (
    TactJamError,
    ValidationError,
    ConflictError,
    PermissionDeniedError,
    NotFoundError,
    DependencyError,
)

__all__ = [
    # Config
    "settings",
    # Exceptions
    "TactJamError",
    "ValidationError",
    "ConflictError",
    "PermissionDeniedError",
    "NotFoundError",
    "DependencyError",
]
