"""
HTTP plumbing shared by the registry transfer modules.

The registry is reached through an injected ``Transport`` - anything that can
build an ``httpx.Request`` and send it. ``httpx.Client`` satisfies the protocol
as-is, so production code hands in a configured client and tests hand in a
client backed by ``httpx.MockTransport``. Retry policy lives in
``RetryingTransport``, a wrapper around another transport, never in the
protocol logic.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Protocol, Type, runtime_checkable

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..settings import Settings
from .oci_errors import (
    OciAuthError,
    OciNotFound,
    OciProtocolError,
    OciRateLimited,
    OciTooLarge,
)

logger = logging.getLogger(__name__)

USER_AGENT = "notary-registry/0.1.0"

# Status codes that map to a specific error class regardless of operation
_STATUS_ERRORS: Dict[int, Type[OciProtocolError]] = {
    401: OciAuthError,
    403: OciAuthError,
    404: OciNotFound,
    429: OciRateLimited,
}


@runtime_checkable
class Transport(Protocol):
    """Executes one request and returns one response."""

    def build_request(self, method: str, url: Any, **kwargs: Any) -> httpx.Request:
        ...

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        ...


class RetryingTransport:
    """
    Transport wrapper that retries transport-level failures with tenacity.

    Only ``httpx.TransportError`` (connect failures, timeouts, dropped
    connections) is retried; any HTTP response, including error statuses, is
    passed straight back to the caller. The last failure is re-raised
    unchanged once attempts are exhausted.
    """

    def __init__(self, inner: Transport, attempts: int, *, wait: Any = None):
        """
        Args:
            inner: Transport to delegate to
            attempts: Total attempts per request (>= 1)
            wait: tenacity wait strategy (defaults to exponential 1s..10s)
        """
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")
        self._inner = inner
        self._attempts = attempts
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=1, max=10)

    def build_request(self, method: str, url: Any, **kwargs: Any) -> httpx.Request:
        return self._inner.build_request(method, url, **kwargs)

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=self._wait,
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._inner.send, request, stream=stream)

    def close(self) -> None:
        close = getattr(self._inner, "close", None)
        if close is not None:
            close()


def create_client(settings: Settings) -> Transport:
    """
    Build the production transport from settings.

    Redirects are never followed by the client itself: blob download follows
    exactly one redirect explicitly.

    Args:
        settings: Registry configuration

    Returns:
        ``httpx.Client``, wrapped in ``RetryingTransport`` when ``http_retry > 0``
    """
    auth = None
    if settings.registry_user and settings.registry_pass:
        auth = httpx.BasicAuth(settings.registry_user, settings.registry_pass)
        logger.debug("Using explicit username/password auth")

    client = httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_s, connect=min(5.0, settings.http_timeout_s)),
        verify=not settings.registry_insecure,
        follow_redirects=False,
        auth=auth,
        headers={"User-Agent": USER_AGENT},
    )
    logger.debug(
        f"Registry client timeout: {settings.http_timeout_s}s, retry: {settings.http_retry}, "
        f"insecure: {settings.registry_insecure}"
    )

    if settings.http_retry > 0:
        return RetryingTransport(client, attempts=settings.http_retry + 1)
    return client


def build_request(
    transport: Transport,
    method: str,
    url: Any,
    *,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> httpx.Request:
    """Build a request, applying a per-call timeout only when one is given."""
    if timeout is not None:
        kwargs["timeout"] = timeout
    return transport.build_request(method, url, **kwargs)


@contextmanager
def send_request(transport: Transport, request: httpx.Request) -> Iterator[httpx.Response]:
    """Send in streaming mode and always release the response body on exit."""
    logger.debug(f"{request.method} {request.url}")
    response = transport.send(request, stream=True)
    try:
        yield response
    finally:
        response.close()


def read_capped(response: httpx.Response, limit: int) -> bytes:
    """
    Read a streaming response body, failing if it is longer than ``limit``.

    Raises:
        OciTooLarge: If the advertised or actual body size exceeds the limit
    """
    length = response.headers.get("Content-Length")
    if length is not None and length.isdigit() and int(length) > limit:
        raise OciTooLarge(
            f"Response body of {length} bytes exceeds read limit of {limit} bytes",
            limit=limit,
        )

    body = bytearray()
    for chunk in response.iter_bytes():
        body.extend(chunk)
        if len(body) > limit:
            raise OciTooLarge(
                f"Response body exceeds read limit of {limit} bytes",
                limit=limit,
            )
    return bytes(body)


def check_status(
    response: httpx.Response,
    operation: str,
    expected: int,
    error_cls: Type[OciProtocolError] = OciProtocolError,
) -> None:
    """
    Raise unless ``response`` carries the ``expected`` status.

    401/403/404/429 map to their dedicated classes; any other unexpected
    status raises ``error_cls``.
    """
    status = response.status_code
    if status == expected:
        return
    cls = _STATUS_ERRORS.get(status, error_cls)
    raise cls(
        f"failed to {operation}: {status} {response.reason_phrase}".rstrip(),
        operation=operation,
        status_code=status,
    )


def resolve_location(response: httpx.Response) -> Optional[httpx.URL]:
    """Absolute URL of the ``Location`` header, or None when absent or unparseable."""
    location = response.headers.get("Location")
    if not location:
        return None
    try:
        return response.request.url.join(location)
    except httpx.InvalidURL:
        logger.debug(f"Ignoring unparseable Location header: {location!r}")
        return None


__all__ = [
    "Transport",
    "RetryingTransport",
    "create_client",
    "build_request",
    "send_request",
    "read_capped",
    "check_status",
    "resolve_location",
]
