"""Custom exception hierarchy for country-atlas.

Exception Hierarchy:
    CountryAtlasError (base)
    ├── DataProviderError
    │   ├── TransportError
    │   └── DecodeError
    ├── AggregationError
    │   └── DirectoryUnavailableError
    └── SessionError

Indicator fetches absorb their DataProviderError subclasses and degrade to
an empty table. Directory fetches raise them, and the aggregator wraps them
in DirectoryUnavailableError, which is the only error a session turns into
its Error state.
"""
from __future__ import annotations

from typing import Optional, Dict, Any


class CountryAtlasError(Exception):
    """Base exception for all country-atlas errors.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Data Provider Errors
class DataProviderError(CountryAtlasError):
    """Base class for data provider errors.

    Attributes:
        provider: Name of the provider that failed
        url: Endpoint that was requested
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        url: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.provider = provider
        self.url = url
        details = details or {}
        if provider:
            details["provider"] = provider
        if url:
            details["url"] = url
        super().__init__(message, code, details)


class TransportError(DataProviderError):
    """Raised on network, connection or non-2xx status failures.

    Attributes:
        status_code: HTTP status when the server answered, None otherwise
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, provider, url, code, details)


class DecodeError(DataProviderError):
    """Raised when a response body does not match the expected schema.

    Examples:
        - Body is not JSON
        - Envelope is not a two-element array
        - Missing required field or wrong field type
        - Duplicate country code in the directory
    """
    pass


# Aggregation Errors
class AggregationError(CountryAtlasError):
    """Base class for failures of an aggregation run."""
    pass


class DirectoryUnavailableError(AggregationError):
    """Raised when the country directory could not be fetched.

    Attributes:
        cause: The TransportError or DecodeError raised by the directory fetch
    """

    def __init__(self, cause: DataProviderError):
        self.cause = cause
        super().__init__(
            f"Country directory unavailable: {cause.message}",
            details={"cause": cause.to_dict()},
        )


class SessionError(CountryAtlasError):
    """Raised when a session is used outside its one-shot lifecycle."""
    pass

