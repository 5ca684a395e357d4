# Fake implementations for testing

from .fake_registry import FakeRegistry, REGISTRY_HOST, STORAGE_HOST

__all__ = ["FakeRegistry", "REGISTRY_HOST", "STORAGE_HOST"]
