"""
Digest and descriptor value types.

A digest is an ``algorithm:encoded`` content hash; a descriptor carries the
digest together with media type and size so an object can be referenced
without embedding its bytes. Both are computed from content and never mutated.
"""
from __future__ import annotations

import hashlib
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .oci_errors import OciDigestMismatch

# OCI image-spec digest grammar: algorithm ":" encoded
_DIGEST_RE = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+$")

# Registered algorithms and the hex length of their encoded part
_ALGORITHMS: Dict[str, int] = {
    "sha256": 64,
    "sha384": 96,
    "sha512": 128,
}

CANONICAL_ALGORITHM = "sha256"


def compute_digest(data: bytes, algorithm: str = CANONICAL_ALGORITHM) -> str:
    """
    Compute the digest of ``data``.

    Args:
        data: Content bytes
        algorithm: One of the registered algorithms (sha256, sha384, sha512)

    Returns:
        Digest string, e.g. ``sha256:<64 hex chars>``

    Raises:
        ValueError: If the algorithm is not registered
    """
    if algorithm not in _ALGORITHMS:
        raise ValueError(f"Unsupported digest algorithm: {algorithm}")
    return f"{algorithm}:{hashlib.new(algorithm, data).hexdigest()}"


def validate_digest(digest: str, *, strict: bool = False) -> str:
    """
    Check ``digest`` against the OCI digest grammar.

    Args:
        digest: Digest string to check
        strict: Additionally require a registered algorithm and a lowercase
            hex encoding of the right length

    Returns:
        The digest unchanged

    Raises:
        ValueError: If the digest is malformed
    """
    if not isinstance(digest, str) or not _DIGEST_RE.match(digest):
        raise ValueError(f"Invalid digest format: {digest!r}")

    if strict:
        algorithm, encoded = digest.split(":", 1)
        expected_len = _ALGORITHMS.get(algorithm)
        if expected_len is None:
            raise ValueError(f"Unsupported digest algorithm: {algorithm}")
        if len(encoded) != expected_len or not re.fullmatch(r"[a-f0-9]+", encoded):
            raise ValueError(f"Invalid {algorithm} digest: {digest!r}")

    return digest


def verify_digest(data: bytes, expected: str) -> None:
    """
    Re-hash ``data`` with the algorithm of ``expected`` and compare.

    Raises:
        ValueError: If ``expected`` is not a strict, registered digest
        OciDigestMismatch: If the content hashes to a different digest
    """
    validate_digest(expected, strict=True)
    algorithm = expected.split(":", 1)[0]
    actual = compute_digest(data, algorithm)
    if actual != expected:
        raise OciDigestMismatch(
            f"Digest mismatch: expected {expected}, got {actual}",
            expected=expected,
            actual=actual,
        )


class Descriptor(BaseModel):
    """
    OCI content descriptor.

    ref: https://github.com/opencontainers/image-spec/blob/main/descriptor.md
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    media_type: Optional[str] = Field(default=None, alias="mediaType", description="Media type of the referenced content")
    digest: str = Field(..., description="Content digest (algorithm:encoded)")
    size: int = Field(default=0, ge=0, description="Content size in bytes")
    urls: Optional[List[str]] = Field(default=None, description="Alternate download locations")
    annotations: Optional[Dict[str, str]] = Field(default=None, description="Arbitrary metadata")

    @field_validator("digest")
    @classmethod
    def validate_digest_format(cls, v):
        return validate_digest(v)

    @field_serializer("annotations")
    def sort_annotations(self, v):
        # Serialized key order must not depend on insertion order
        return None if v is None else dict(sorted(v.items()))

    def to_dict(self) -> dict:
        """OCI JSON form with unset optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


def descriptor_from_bytes(data: bytes, media_type: Optional[str] = None) -> Descriptor:
    """
    Build the descriptor of ``data`` using the canonical digest algorithm.

    Args:
        data: Content bytes
        media_type: Media type to record on the descriptor

    Returns:
        Descriptor with digest and size computed locally
    """
    return Descriptor(media_type=media_type, digest=compute_digest(data), size=len(data))


__all__ = [
    "CANONICAL_ALGORITHM",
    "Descriptor",
    "compute_digest",
    "descriptor_from_bytes",
    "validate_digest",
    "verify_digest",
]
