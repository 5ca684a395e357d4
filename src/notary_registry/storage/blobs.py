"""
Blob transfer over the OCI Distribution API.

Download follows at most one temporary redirect, since registries commonly
offload blob storage to a separate location. Upload is the monolithic
two-phase flow: open an upload session, then push the whole content in one
request with the expected digest attached for server-side verification.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from .descriptor import validate_digest
from .http import Transport, build_request, check_status, read_capped, resolve_location, send_request
from .oci_errors import OciRedirectError, OciUploadCommitError, OciUploadInitError
from .oci_media_types import MAX_READ_BYTES, OCI_GENERIC_LAYER

logger = logging.getLogger(__name__)


class BlobTransfer:
    """
    Digest-addressed blob download and upload for one repository.

    Holds only fixed configuration; safe to share across threads when the
    transport is.
    """

    def __init__(self, transport: Transport, base_url: str, name: str,
                 max_read_bytes: int = MAX_READ_BYTES):
        """
        Args:
            transport: Request executor (e.g. ``httpx.Client``)
            base_url: Distribution API root (e.g. ``https://ghcr.io/v2``)
            name: Repository name (e.g. ``myorg/app``)
            max_read_bytes: Cap on downloaded blob size
        """
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._name = name
        self._max_read_bytes = max_read_bytes

    def blob_url(self, digest: str) -> str:
        return f"{self._base_url}/{self._name}/blobs/{digest}"

    def upload_url(self) -> str:
        return f"{self._base_url}/{self._name}/blobs/uploads/"

    def download(self, digest: str, *, timeout: Optional[float] = None) -> bytes:
        """
        GET blob content by digest, following one temporary redirect.

        Args:
            digest: Content digest (e.g. "sha256:abc...")
            timeout: Per-request timeout in seconds

        Returns:
            Blob content as bytes (not yet verified against the digest)

        Raises:
            ValueError: If the digest is malformed
            OciNotFound: If blob doesn't exist
            OciRedirectError: If the redirect target redirects again or a
                redirect carries no Location
            OciTooLarge: If the blob exceeds the read cap
            OciProtocolError: For any other unexpected status
            httpx.TransportError: If the request itself fails
        """
        validate_digest(digest)
        operation = "get blob"

        request = build_request(self._transport, "GET", self.blob_url(digest), timeout=timeout)
        with send_request(self._transport, request) as response:
            if response.status_code == httpx.codes.OK:
                return read_capped(response, self._max_read_bytes)
            if response.status_code != httpx.codes.TEMPORARY_REDIRECT:
                check_status(response, operation, httpx.codes.OK)
            location = resolve_location(response)

        if location is None:
            raise OciRedirectError(
                f"failed to {operation}: redirect without a usable Location header",
                operation=operation,
                status_code=httpx.codes.TEMPORARY_REDIRECT,
            )

        logger.debug(f"Following blob redirect for {digest} to {location.host}")
        request = build_request(self._transport, "GET", location, timeout=timeout)
        with send_request(self._transport, request) as response:
            if response.status_code in (httpx.codes.TEMPORARY_REDIRECT, httpx.codes.PERMANENT_REDIRECT,
                                        httpx.codes.FOUND, httpx.codes.SEE_OTHER,
                                        httpx.codes.MOVED_PERMANENTLY):
                raise OciRedirectError(
                    f"failed to {operation}: too many redirects ({response.status_code})",
                    operation=operation,
                    status_code=response.status_code,
                )
            check_status(response, operation, httpx.codes.OK)
            return read_capped(response, self._max_read_bytes)

    def upload(self, data: bytes, digest: str, *, timeout: Optional[float] = None) -> str:
        """
        Upload ``data`` as a blob in a single monolithic request.

        Args:
            data: Blob content
            digest: Expected content digest, verified by the registry
            timeout: Per-request timeout in seconds

        Returns:
            The committed digest

        Raises:
            ValueError: If the digest is malformed
            OciUploadInitError: If the session can't be opened or has no Location
            OciUploadCommitError: If the content push is not accepted
            OciAuthError / OciNotFound / OciRateLimited: For those statuses
            httpx.TransportError: If a request itself fails
        """
        validate_digest(digest)

        # Phase 1: open upload session
        operation = "init upload"
        request = build_request(self._transport, "POST", self.upload_url(), timeout=timeout)
        with send_request(self._transport, request) as response:
            check_status(response, operation, httpx.codes.ACCEPTED, OciUploadInitError)
            location = resolve_location(response)

        if location is None:
            raise OciUploadInitError(
                f"failed to {operation}: registry returned no usable Location header",
                operation=operation,
                status_code=httpx.codes.ACCEPTED,
            )
        logger.debug(f"Upload session opened for {digest}")

        # Phase 2: push content to the session, keeping any session state params
        operation = "upload"
        request = build_request(
            self._transport,
            "PUT",
            location.copy_merge_params({"digest": digest}),
            content=data,
            headers={"Content-Type": OCI_GENERIC_LAYER},
            timeout=timeout,
        )
        with send_request(self._transport, request) as response:
            check_status(response, operation, httpx.codes.CREATED, OciUploadCommitError)

        logger.debug(f"Committed blob {digest} ({len(data)} bytes)")
        return digest


__all__ = ["BlobTransfer"]
