"""
notary-registry: store and link signature artifacts in an OCI registry.

Signatures are uploaded as content-addressed blobs and linked to the manifest
they sign through artifact manifests, leaving the signed manifest untouched.
"""
from .repository import Repository
from .settings import Settings, create_settings_from_env
from .storage.descriptor import Descriptor

__version__ = "0.1.0"

__all__ = ["Repository", "Settings", "create_settings_from_env", "Descriptor"]
