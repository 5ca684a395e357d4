"""
OCI registry error classes.

Provides a clear taxonomy of errors that can occur during registry exchanges.
Unexpected status codes are mapped to protocol errors carrying the operation
name and observed status; decode, size and digest failures get their own
classes so callers can tell "request rejected" apart from "wire format violated".

Transport failures (``httpx.TransportError``) are NOT wrapped here - they
propagate to the caller verbatim.
"""
from __future__ import annotations

from typing import Optional


class OciError(Exception):
    """Base class for all OCI registry errors."""
    pass


class OciProtocolError(OciError):
    """
    Registry answered outside the documented contract.

    Raised when:
    - A response carries a status other than the documented success code
    - A required header (e.g. upload session ``Location``) is missing
    """

    def __init__(self, message: str, *, operation: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class OciAuthError(OciProtocolError):
    """
    Authentication or authorization error.

    Raised when:
    - HTTP 401 Unauthorized (invalid credentials)
    - HTTP 403 Forbidden (insufficient permissions)
    """
    pass


class OciNotFound(OciProtocolError):
    """
    Resource not found in registry.

    Raised when:
    - HTTP 404 Not Found (manifest, blob, or repository doesn't exist)
    """
    pass


class OciRateLimited(OciProtocolError):
    """Rate limit exceeded (HTTP 429 Too Many Requests)."""
    pass


class OciRedirectError(OciProtocolError):
    """
    Redirect could not be followed.

    Raised when:
    - A redirect target answers with another redirect
    - A redirect response has no usable ``Location`` header
    """
    pass


class OciUploadInitError(OciProtocolError):
    """Upload session could not be opened (non-202 or missing Location)."""
    pass


class OciUploadCommitError(OciProtocolError):
    """Blob content push to the upload session was not accepted."""
    pass


class OciDecodeError(OciError):
    """Response body does not parse as the expected JSON shape."""

    def __init__(self, message: str, *, operation: str):
        super().__init__(message)
        self.operation = operation


class OciTooLarge(OciError):
    """
    Content too large for the configured read cap.

    Raised instead of returning a truncated body when a response is longer
    than ``limit`` bytes.
    """

    def __init__(self, message: str, *, limit: int):
        super().__init__(message)
        self.limit = limit


class OciDigestMismatch(OciError):
    """
    Content digest validation failed.

    Raised when:
    - get: downloaded bytes don't hash to the requested digest
    """

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


__all__ = [
    "OciError",
    "OciProtocolError",
    "OciAuthError",
    "OciNotFound",
    "OciRateLimited",
    "OciRedirectError",
    "OciUploadInitError",
    "OciUploadCommitError",
    "OciDecodeError",
    "OciTooLarge",
    "OciDigestMismatch",
]
