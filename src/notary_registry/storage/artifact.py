"""
Artifact manifest documents for the oci-artifacts link extension.

An artifact manifest links a payload blob (its ``config``) to one or more
target manifests without touching those manifests. The registry indexes
artifacts by target so they can be enumerated through the links endpoint.
"""
from __future__ import annotations

import json
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .descriptor import Descriptor
from .oci_media_types import ARTIFACT_MANIFEST, ARTIFACT_SCHEMA_VERSION


class Artifact(BaseModel):
    """Artifact manifest document."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION, alias="schemaVersion")
    media_type: str = Field(default=ARTIFACT_MANIFEST, alias="mediaType")
    artifact_type: str = Field(..., alias="artifactType", description="Purpose of the link")
    config: Descriptor = Field(..., description="Linked payload blob")
    manifests: List[Descriptor] = Field(..., min_length=1, description="Manifests this artifact links to")

    def to_json_bytes(self) -> bytes:
        """
        Serialize to compact JSON.

        Key order follows field order, and annotation keys are sorted, so equal
        documents always yield the same bytes and therefore the same digest.
        """
        return json.dumps(
            self.model_dump(by_alias=True, exclude_none=True),
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")


class LinkedArtifact(BaseModel):
    """
    Artifact entry as returned by the links endpoint.

    Only ``config`` is needed to answer a lookup, so the remaining artifact
    fields are accepted when missing or unrecognized.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: Optional[int] = Field(default=None, alias="schemaVersion")
    media_type: Optional[str] = Field(default=None, alias="mediaType")
    artifact_type: Optional[str] = Field(default=None, alias="artifactType")
    config: Descriptor
    manifests: List[Descriptor] = Field(default_factory=list)


class LinksResponse(BaseModel):
    """Body of the links-enumeration endpoint: ``{"links": [LinkedArtifact, ...]}``."""
    links: List[LinkedArtifact] = Field(default_factory=list)

    @field_validator("links", mode="before")
    @classmethod
    def null_links_as_empty(cls, v):
        # Some registries serialize an empty result as null
        return [] if v is None else v


__all__ = ["Artifact", "LinkedArtifact", "LinksResponse"]
