"""
Registry storage layer: value types, error taxonomy and the HTTP transfer
modules the repository facade is built on.
"""
from .artifact import Artifact, LinkedArtifact, LinksResponse
from .descriptor import Descriptor, compute_digest, descriptor_from_bytes, validate_digest, verify_digest
from .oci_errors import (
    OciAuthError,
    OciDecodeError,
    OciDigestMismatch,
    OciError,
    OciNotFound,
    OciProtocolError,
    OciRateLimited,
    OciRedirectError,
    OciTooLarge,
    OciUploadCommitError,
    OciUploadInitError,
)

__all__ = [
    "Artifact",
    "LinkedArtifact",
    "LinksResponse",
    "Descriptor",
    "compute_digest",
    "descriptor_from_bytes",
    "validate_digest",
    "verify_digest",
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
