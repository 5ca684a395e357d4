"""
Settings and configuration for notary-registry.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables at repository construction time.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

from .storage.oci_media_types import MAX_READ_BYTES

__all__ = ["Settings", "create_settings_from_env"]


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for a registry repository.

    Registry Settings:
        registry_url: OCI registry URL (required)
        registry_repo: OCI repository name (required)
        registry_insecure: Allow HTTP connections for local/dev use
        registry_user: Username for registry authentication
        registry_pass: Password for registry authentication
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Number of retries for transport failures (0=no retry)
        max_read_bytes: Cap on any response body read into memory
    """
    registry_url: str
    registry_repo: str
    registry_insecure: bool = False
    registry_user: Optional[str] = None
    registry_pass: Optional[str] = None
    http_timeout_s: float = 30.0
    http_retry: int = 0
    max_read_bytes: int = MAX_READ_BYTES

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.registry_url:
            raise ValueError("registry_url is required")

        # host[:port] or http(s)://host[:port][/path]
        url_pattern = r"^(?:https?://)?[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$"
        if not re.match(url_pattern, self.registry_url):
            raise ValueError(f"Invalid registry_url format: {self.registry_url}")

        if not self.registry_repo:
            raise ValueError("registry_repo is required")

        # Repository name must follow OCI naming conventions
        repo_pattern = r"^[a-z0-9]+(?:[._-][a-z0-9]+)*(?:/[a-z0-9]+(?:[._-][a-z0-9]+)*)*$"
        if not re.match(repo_pattern, self.registry_repo):
            raise ValueError(f"Invalid registry_repo format: {self.registry_repo}. Must follow OCI naming conventions.")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

        if self.max_read_bytes <= 0:
            raise ValueError(f"max_read_bytes must be positive, got {self.max_read_bytes}")

        if bool(self.registry_user) != bool(self.registry_pass):
            raise ValueError("registry_user and registry_pass must be specified together")

    @property
    def base_url(self) -> str:
        """
        Distribution API root, e.g. ``https://ghcr.io/v2``.

        A bare host gets ``http://`` when insecure and ``https://`` otherwise.
        """
        url = self.registry_url.rstrip("/")
        if not url.startswith(("http://", "https://")):
            scheme = "http" if self.registry_insecure else "https"
            url = f"{scheme}://{url}"
        if not url.endswith("/v2"):
            url = f"{url}/v2"
        return url


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - NOTARY_REGISTRY_URL (required)
        - NOTARY_REGISTRY_REPO (required)
        - NOTARY_REGISTRY_INSECURE (default: false)
        - NOTARY_REGISTRY_USERNAME (optional)
        - NOTARY_REGISTRY_PASSWORD (optional)
        - NOTARY_HTTP_TIMEOUT (default: 30.0)
        - NOTARY_HTTP_RETRY (default: 0)
        - NOTARY_MAX_READ_BYTES (default: 4194304)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    registry_url = os.getenv("NOTARY_REGISTRY_URL")
    registry_repo = os.getenv("NOTARY_REGISTRY_REPO")

    if not registry_url:
        raise ValueError("NOTARY_REGISTRY_URL environment variable is required")
    if not registry_repo:
        raise ValueError("NOTARY_REGISTRY_REPO environment variable is required")

    return Settings(
        registry_url=registry_url,
        registry_repo=registry_repo,
        registry_insecure=str_to_bool(os.getenv("NOTARY_REGISTRY_INSECURE", "false")),
        registry_user=os.getenv("NOTARY_REGISTRY_USERNAME"),
        registry_pass=os.getenv("NOTARY_REGISTRY_PASSWORD"),
        http_timeout_s=get_float("NOTARY_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("NOTARY_HTTP_RETRY", 0),
        max_read_bytes=get_int("NOTARY_MAX_READ_BYTES", MAX_READ_BYTES),
    )
