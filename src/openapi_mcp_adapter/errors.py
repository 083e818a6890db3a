"""Exceptions raised inside the adapter."""

from __future__ import annotations

from typing import Optional


class AdapterError(Exception):
    pass


class ValidationError(AdapterError):
    """A required argument is absent or a path placeholder cannot be filled."""


class AuthenticationError(AdapterError):
    """No bearer token could be resolved from any source."""


class ApiError(AdapterError):
    """Upstream answered outside the 2xx range, or the transport failed (status 0)."""

    def __init__(self, status: int, body: str, message: Optional[str] = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message or f"HTTP {status}: {body}")


class SerializationError(AdapterError):
    """Response declared JSON but could not be decoded."""


class DuplicateToolError(AdapterError):
    pass


class CatalogError(AdapterError):
    pass
