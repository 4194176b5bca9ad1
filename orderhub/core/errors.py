"""
Domain exceptions raised by the storage and service layers.
The API layer maps them onto HTTP responses in main.py.
"""

from typing import List, Dict, Optional


class OrderHubError(Exception):
    """Base class for all OrderHub errors."""


class NotFoundError(OrderHubError):
    """A referenced record does not exist."""

    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class ValidationFailed(OrderHubError):
    """Input is well-formed but violates a business rule."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def for_field(cls, path: str, message: str) -> 'ValidationFailed':
        return cls("Validation error", [{"path": path, "message": message}])


class ConflictError(OrderHubError):
    """Duplicate unique value, or a record still referenced by others."""


class OrderNumberConflict(OrderHubError):
    """Generated order number collided with an existing one. Retryable."""
