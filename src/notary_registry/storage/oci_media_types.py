"""
OCI media types and constants.

Single source of truth for all media types, artifact types and protocol
constants used when talking to the registry.
"""
from __future__ import annotations

# Artifact manifest published by link() (oci-artifacts extension)
ARTIFACT_MANIFEST = "application/vnd.cncf.oras.artifact.manifest.v1+json"
ARTIFACT_SCHEMA_VERSION = 2

# Notary v2 signatures
NOTARY_V2_ARTIFACT_TYPE = "application/vnd.cncf.notary.v2"
NOTARY_SIGNATURE_CONFIG = "application/vnd.cncf.notary.signature.config.v2+jwt"

# Blob upload body
OCI_GENERIC_LAYER = "application/octet-stream"

# Cap on any response body read into memory (4 MiB)
MAX_READ_BYTES = 4 * 1024 * 1024

# Path prefix of the link-discovery extension, relative to the API root
LINKS_EXTENSION_PREFIX = "_ext/oci-artifacts/v1"


__all__ = [
    "ARTIFACT_MANIFEST",
    "ARTIFACT_SCHEMA_VERSION",
    "NOTARY_V2_ARTIFACT_TYPE",
    "NOTARY_SIGNATURE_CONFIG",
    "OCI_GENERIC_LAYER",
    "MAX_READ_BYTES",
    "LINKS_EXTENSION_PREFIX",
]
