"""
Link discovery through the oci-artifacts registry extension.

The registry indexes artifact manifests by the manifests they link to. A
single GET, filtered by artifact type, enumerates every artifact pointing at
a target manifest.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .artifact import LinksResponse
from .descriptor import validate_digest
from .http import Transport, build_request, check_status, read_capped, send_request
from .oci_errors import OciDecodeError
from .oci_media_types import LINKS_EXTENSION_PREFIX, MAX_READ_BYTES

logger = logging.getLogger(__name__)


class LinkDiscovery:
    """Queries the links endpoint of one repository."""

    def __init__(self, transport: Transport, base_url: str, name: str,
                 max_read_bytes: int = MAX_READ_BYTES):
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._name = name
        self._max_read_bytes = max_read_bytes

    def links_url(self, manifest_digest: str) -> str:
        return f"{self._base_url}/{LINKS_EXTENSION_PREFIX}/{self._name}/manifests/{manifest_digest}/links"

    def lookup(self, manifest_digest: str, artifact_type: str,
               *, timeout: Optional[float] = None) -> List[str]:
        """
        List config digests of artifacts of ``artifact_type`` linked to a manifest.

        Args:
            manifest_digest: Digest of the target manifest
            artifact_type: Only artifacts with this type are returned
            timeout: Per-request timeout in seconds

        Returns:
            Config (payload) digests, in response order

        Raises:
            ValueError: If the digest is malformed
            OciProtocolError: For any status other than 200
            OciTooLarge: If the body exceeds the read cap
            OciDecodeError: If the body is not ``{"links": [Artifact, ...]}``
            httpx.TransportError: If the request itself fails
        """
        validate_digest(manifest_digest)
        operation = "lookup signatures"

        request = build_request(
            self._transport,
            "GET",
            self.links_url(manifest_digest),
            params={"artifact-type": artifact_type},
            timeout=timeout,
        )
        with send_request(self._transport, request) as response:
            check_status(response, operation, httpx.codes.OK)
            body = read_capped(response, self._max_read_bytes)

        try:
            result = LinksResponse.model_validate_json(body)
        except ValidationError as e:
            raise OciDecodeError(f"Invalid links response for {manifest_digest}: {e}",
                                 operation=operation) from e

        digests = [artifact.config.digest for artifact in result.links]
        logger.debug(f"Found {len(digests)} linked artifacts for {manifest_digest}")
        return digests


__all__ = ["LinkDiscovery"]
