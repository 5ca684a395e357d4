"""Manifest publication over the OCI Distribution API."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from .descriptor import validate_digest
from .http import Transport, build_request, check_status, send_request
from .oci_media_types import ARTIFACT_MANIFEST

logger = logging.getLogger(__name__)


class ManifestTransfer:
    """Publishes JSON manifests at their digest-derived location."""

    def __init__(self, transport: Transport, base_url: str, name: str):
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._name = name

    def manifest_url(self, reference: str) -> str:
        return f"{self._base_url}/{self._name}/manifests/{reference}"

    def publish(self, payload: bytes, digest: str, media_type: str = ARTIFACT_MANIFEST,
                *, timeout: Optional[float] = None) -> None:
        """
        PUT manifest by digest with explicit media type.

        Identical content always lands at the same location, so publishing
        twice is harmless and no existence check is made.

        Args:
            payload: Manifest content as bytes
            digest: Digest of ``payload``
            media_type: Content-Type to publish under
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If the digest is malformed
            OciAuthError: If authentication fails
            OciProtocolError: For any status other than 201
            httpx.TransportError: If the request itself fails
        """
        validate_digest(digest)
        request = build_request(
            self._transport,
            "PUT",
            self.manifest_url(digest),
            content=payload,
            headers={"Content-Type": media_type},
            timeout=timeout,
        )
        with send_request(self._transport, request) as response:
            check_status(response, "put manifest", httpx.codes.CREATED)
        logger.debug(f"Published manifest {digest} as {media_type}")


__all__ = ["ManifestTransfer"]
