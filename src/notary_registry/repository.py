"""
Signature repository facade.

Composes blob transfer, manifest publication and link discovery into the four
caller-visible operations:

- lookup: which signature payloads are linked to a manifest
- get: fetch a payload by digest
- put: upload a payload, returning its locally computed descriptor
- link: publish an artifact manifest linking a payload to a manifest

The repository holds only fixed configuration (transport, API root,
repository name, read cap, artifact type) and is never mutated after
construction. Each call is an independent exchange keyed by the digests and
bytes it is given.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .settings import Settings
from .storage.artifact import Artifact
from .storage.blobs import BlobTransfer
from .storage.descriptor import Descriptor, descriptor_from_bytes, validate_digest, verify_digest
from .storage.http import Transport, create_client
from .storage.links import LinkDiscovery
from .storage.manifests import ManifestTransfer
from .storage.oci_media_types import (
    ARTIFACT_MANIFEST,
    MAX_READ_BYTES,
    NOTARY_SIGNATURE_CONFIG,
    NOTARY_V2_ARTIFACT_TYPE,
)

logger = logging.getLogger(__name__)


class Repository:
    """Signature storage and linking for one registry repository."""

    def __init__(self, transport: Transport, base_url: str, name: str, *,
                 max_read_bytes: int = MAX_READ_BYTES,
                 artifact_type: str = NOTARY_V2_ARTIFACT_TYPE,
                 config_media_type: str = NOTARY_SIGNATURE_CONFIG):
        """
        Args:
            transport: Request executor (e.g. ``httpx.Client``)
            base_url: Distribution API root (e.g. ``https://ghcr.io/v2``)
            name: Repository name (e.g. ``myorg/app``)
            max_read_bytes: Cap on any response body read into memory
            artifact_type: Artifact type recorded by link() and filtered by lookup()
            config_media_type: Media type recorded on payload descriptors by put()
        """
        if not base_url:
            raise ValueError("base_url is required")
        if not name:
            raise ValueError("name is required")

        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.name = name
        self.artifact_type = artifact_type
        self.config_media_type = config_media_type

        self._blobs = BlobTransfer(transport, self.base_url, name, max_read_bytes)
        self._manifests = ManifestTransfer(transport, self.base_url, name)
        self._links = LinkDiscovery(transport, self.base_url, name, max_read_bytes)

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[Transport] = None) -> "Repository":
        """
        Build a repository from settings.

        Args:
            settings: Registry configuration
            transport: Transport to use instead of one built from settings
        """
        if transport is None:
            transport = create_client(settings)
        logger.debug(f"Repository {settings.registry_repo} at {settings.base_url}")
        return cls(transport, settings.base_url, settings.registry_repo,
                   max_read_bytes=settings.max_read_bytes)

    def lookup(self, manifest_digest: str, *, timeout: Optional[float] = None) -> List[str]:
        """
        Digests of signature payloads linked to ``manifest_digest``, in registry order.

        Raises:
            OciProtocolError: If the registry rejects the query
            OciDecodeError: If the response is not a valid links document
        """
        return self._links.lookup(manifest_digest, self.artifact_type, timeout=timeout)

    def get(self, payload_digest: str, *, timeout: Optional[float] = None) -> bytes:
        """
        Fetch payload bytes by digest and verify them against the digest.

        Raises:
            ValueError: If the digest is malformed or of an unsupported algorithm
            OciNotFound: If the blob doesn't exist
            OciDigestMismatch: If the content doesn't hash to ``payload_digest``
            OciTooLarge: If the blob exceeds the read cap
        """
        validate_digest(payload_digest, strict=True)
        data = self._blobs.download(payload_digest, timeout=timeout)
        verify_digest(data, payload_digest)
        return data

    def put(self, payload: bytes, *, timeout: Optional[float] = None) -> Descriptor:
        """
        Upload a payload blob.

        The descriptor is computed locally before upload and returned as-is;
        nothing in the registry's response can alter it.

        Raises:
            OciUploadInitError: If the upload session can't be opened
            OciUploadCommitError: If the content push is rejected
        """
        desc = descriptor_from_bytes(payload, self.config_media_type)
        self._blobs.upload(payload, desc.digest, timeout=timeout)
        logger.info(f"Uploaded payload {desc.digest} ({desc.size} bytes) to {self.name}")
        return desc

    def link(self, manifest: Descriptor, payload: Descriptor, *,
             timeout: Optional[float] = None) -> Descriptor:
        """
        Publish an artifact manifest linking ``payload`` to ``manifest``.

        Args:
            manifest: Descriptor of the target manifest
            payload: Descriptor of a previously uploaded payload (see put())

        Returns:
            Descriptor of the published artifact manifest

        Raises:
            OciProtocolError: If the registry rejects the manifest
        """
        artifact = Artifact(
            artifact_type=self.artifact_type,
            config=payload,
            manifests=[manifest],
        )
        artifact_json = artifact.to_json_bytes()
        desc = descriptor_from_bytes(artifact_json, ARTIFACT_MANIFEST)
        self._manifests.publish(artifact_json, desc.digest, ARTIFACT_MANIFEST, timeout=timeout)
        logger.info(f"Linked {payload.digest} to {manifest.digest} via {desc.digest}")
        return desc

    def close(self) -> None:
        """Close the underlying transport if it supports closing."""
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


__all__ = ["Repository"]
