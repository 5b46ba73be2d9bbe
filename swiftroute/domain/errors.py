"""Domain error taxonomy.

The API layer maps each class to an HTTP status; nothing here knows about HTTP.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for every error the service reports to callers."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(DispatchError):
    """Malformed or missing request fields, or a disallowed state change."""


class NotFoundError(DispatchError):
    """A referenced order, partner or assignment does not exist."""


class ConflictError(DispatchError):
    """The store refused a change because other records still depend on it."""


class UpstreamServiceError(DispatchError):
    """The persistence store or the generative-model service failed."""


class UpstreamTimeoutError(UpstreamServiceError):
    """An outbound call exceeded its timeout."""


class MalformedUpstreamResponse(DispatchError):
    """The generative model answered, but not with the expected JSON structure."""

    def __init__(self, message: str, raw_response: str | None = None):
        super().__init__(message, detail=(raw_response or "")[:500] or None)
        self.raw_response = raw_response


class ConfigurationError(DispatchError):
    """Required credentials or connection settings are missing."""
