"""
Manifest schema for the Yellowcake mod catalog.

The remote catalog is a JSON array with one object per mod.  Only ``id``
is required; every other field falls back to a default so that older or
hand-written catalog entries still load.

Entry example:

{
    "id": "wso-voicepack-de",
    "displayName": "German Voice Pack",
    "description": "[Voice Pack] Replaces the radio chatter.",
    "authors": ["Kessel"],
    "tags": ["VoicePack", "Audio"],
    "infoUrl": "https://example.invalid/wso-voicepack-de",
    "category": "Audio",
    "version": "1.0.2",
    "latestVersion": "1.1.0",
    "downloadUrl": "https://example.invalid/wso-voicepack-de-1.1.0.zip",
    "expectedHash": "sha256:9f2c...",
    "dependencies": ["wso-core"]
}
"""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CATEGORY = "plugin"
DEFAULT_VERSION = "0.0.0"

_log = logging.getLogger(__name__)


class ManifestEntry(BaseModel):
    """One mod as described by the remote catalog, before normalization."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    display_name: str = Field(default="", alias="displayName")
    description: str | None = None
    authors: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    info_url: str | None = Field(default=None, alias="infoUrl")
    category: str = DEFAULT_CATEGORY
    version: str = DEFAULT_VERSION
    latest_version: str | None = Field(default=None, alias="latestVersion")
    download_url: str | None = Field(default=None, alias="downloadUrl")
    expected_hash: str | None = Field(default=None, alias="expectedHash")
    dependencies: list[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def _strip_id(cls, v: str) -> str:
        return v.strip()

    @field_validator("display_name", "category", "version", mode="before")
    @classmethod
    def _none_to_default(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].get_default()
        return v

    @field_validator("authors", "tags", "dependencies", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return [] if v is None else v

    @field_validator("expected_hash", "download_url", "info_url")
    @classmethod
    def _null_literal(cls, v: str | None) -> str | None:
        # the catalog sometimes carries the literal string "null"
        if v is None or not v.strip() or v.strip().lower() == "null":
            return None
        return v.strip()


def parse_manifest(data: bytes | str) -> list[ManifestEntry]:
    """Parse a catalog document into its valid entries.

    Entries with a blank id or that fail validation are logged and
    skipped.  Raises ``json.JSONDecodeError`` if the data is not JSON and
    ``ValueError`` if the document is not a list.
    """
    doc = json.loads(data)
    if not isinstance(doc, list):
        raise ValueError(f"Manifest must be a JSON array, got {type(doc).__name__}")

    entries: list[ManifestEntry] = []
    for index, raw in enumerate(doc):
        if not isinstance(raw, dict):
            _log.warning("Skipping manifest entry #%d: not an object", index)
            continue
        try:
            entry = ManifestEntry.model_validate(raw)
        except ValidationError as exc:
            _log.warning("Skipping manifest entry #%d: %s", index, exc.errors()[0]["msg"])
            continue
        if not entry.id:
            _log.warning("Skipping manifest entry #%d: blank id", index)
            continue
        entries.append(entry)

    _log.info("Parsed %d of %d manifest entries", len(entries), len(doc))
    return entries
