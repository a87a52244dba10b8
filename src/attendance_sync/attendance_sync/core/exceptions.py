from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class RecordNotFound(DomainError):
    """Raised when a stored day file does not exist."""


class DeviceUnreachable(DomainError):
    """Raised when a terminal cannot be connected to or read from."""


class MalformedRecord(DomainError):
    """Raised when a stored or raw record lacks required fields."""


class StoreWriteFailure(DomainError):
    """Raised when the record store cannot persist a day file."""


class ForwardFailure(DomainError):
    """Raised when the downstream collector rejects or misses a batch."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
