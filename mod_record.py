"""
Normalized mod records.

A ``ModRecord`` is built from a catalog ``ManifestEntry`` and then run
through ``finalize_from_manifest``, which derives the classification
flags (voice pack / livery / mission / addon), decides whether the download hash
should be verified and whether an update is available.

Derived state lives in private attributes and is exposed through
read-only properties: callers can only change it by changing the stored
fields and finalizing again.  Every helper here returns a new record and
leaves its input untouched, so a UI can diff the old and new snapshots.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_serializer

import version_resolver
from manifest_schema import DEFAULT_CATEGORY, DEFAULT_VERSION, ManifestEntry, parse_manifest

_log = logging.getLogger(__name__)

VOICE_PACK_TAG = "voicepack"
LIVERY_TAG = "livery"
MISSION_TAG = "mission"
ADDON_CATEGORY = "addon"
VOICE_PACK_MARKER = "[voice pack]"

# UI-only state that the store never keeps
_TRANSIENT_FIELDS = {"is_downloading", "download_progress"}


class ModRecord(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True, min_length=1)
    name: str = ""
    description: str | None = None
    authors: list[str] = Field(default_factory=list)
    tags: set[str] = Field(default_factory=set)
    info_url: str | None = None
    category: str = DEFAULT_CATEGORY
    version: str = DEFAULT_VERSION
    latest_version: str | None = None
    download_url: str | None = None
    expected_hash: str | None = None
    installed_hash: str | None = None
    dependencies: list[str] = Field(default_factory=list)

    is_enabled: bool = False
    is_installed: bool = False
    is_downloading: bool = False
    download_progress: float = Field(default=0.0, ge=0.0, le=1.0)

    _is_voice_pack: bool = PrivateAttr(default=False)
    _is_livery: bool = PrivateAttr(default=False)
    _is_mission: bool = PrivateAttr(default=False)
    _is_addon: bool = PrivateAttr(default=False)
    _has_update: bool = PrivateAttr(default=False)

    @field_serializer("tags")
    def _sorted_tags(self, tags: set[str]) -> list[str]:
        return sorted(tags)

    @property
    def is_voice_pack(self) -> bool:
        return self._is_voice_pack

    @property
    def is_livery(self) -> bool:
        return self._is_livery

    @property
    def is_mission(self) -> bool:
        return self._is_mission

    @property
    def is_addon(self) -> bool:
        return self._is_addon

    @property
    def has_update(self) -> bool:
        return self._has_update

    @property
    def can_update(self) -> bool:
        return self._has_update and not self.is_downloading

    @property
    def should_verify_hash(self) -> bool:
        return not (self._is_voice_pack or self._is_livery or self._is_mission or self._is_addon)

    @property
    def author(self) -> str:
        return self.authors[0] if self.authors else "Unknown"

    @property
    def download_progress_text(self) -> str:
        return f"{self.download_progress * 100:.1f}%"

    def finalize_from_manifest(self) -> ModRecord:
        return finalize_from_manifest(self)

    def __str__(self) -> str:
        return f"{self.name} v{self.version} ({self.id})"


def finalize_from_manifest(record: ModRecord) -> ModRecord:
    """Return a copy of ``record`` with defaults filled and derived state recomputed.

    ``has_update`` is only recomputed when both versions are non-blank;
    otherwise the previous value carries over.
    """
    updates: dict[str, object] = {}
    if not record.name.strip():
        updates["name"] = record.id

    latest = record.latest_version
    if latest is None or not latest.strip():
        latest = record.version
        updates["latest_version"] = latest

    tags = {t.strip().lower() for t in record.tags}
    category = record.category.lower()
    description = (record.description or "").lower()

    is_voice_pack = (
        VOICE_PACK_TAG in tags
        or "voice" in category
        or VOICE_PACK_MARKER in description
    )
    is_livery = LIVERY_TAG in tags or "livery" in category
    is_mission = MISSION_TAG in tags or "mission" in category
    is_addon = category.strip() == ADDON_CATEGORY

    if is_voice_pack or is_livery or is_mission or is_addon:
        updates["expected_hash"] = None

    has_update = record.has_update
    if latest.strip() and record.version.strip():
        has_update = version_resolver.has_update(latest, record.version)

    result = record.model_copy(update=updates, deep=True)
    result._is_voice_pack = is_voice_pack
    result._is_livery = is_livery
    result._is_mission = is_mission
    result._is_addon = is_addon
    result._has_update = has_update
    return result


def record_from_manifest(entry: ManifestEntry) -> ModRecord:
    record = ModRecord(
        id=entry.id,
        name=entry.display_name,
        description=entry.description,
        authors=list(entry.authors),
        tags=set(entry.tags),
        info_url=entry.info_url,
        category=entry.category,
        version=entry.version,
        latest_version=entry.latest_version,
        download_url=entry.download_url,
        expected_hash=entry.expected_hash,
        dependencies=list(entry.dependencies),
    )
    return finalize_from_manifest(record)


def load_manifest_records(data: bytes | str) -> list[ModRecord]:
    """Parse a catalog document and finalize every valid entry."""
    records = [record_from_manifest(entry) for entry in parse_manifest(data)]
    updates = sum(1 for r in records if r.has_update)
    _log.info("Loaded %d mod record(s), %d with updates", len(records), updates)
    return records


def mark_installed(
    record: ModRecord, version: str, installed_hash: str | None = None
) -> ModRecord:
    installed = record.model_copy(
        update={"is_installed": True, "version": version, "installed_hash": installed_hash},
        deep=True,
    )
    return finalize_from_manifest(installed)


def mark_uninstalled(record: ModRecord) -> ModRecord:
    result = record.model_copy(
        update={"is_installed": False, "is_enabled": False, "installed_hash": None},
        deep=True,
    )
    result._has_update = False
    return result


def apply_update(record: ModRecord) -> ModRecord:
    """Promote ``latest_version`` to the installed version after a successful download."""
    target = record.latest_version or record.version
    updated = record.model_copy(
        update={"version": target, "is_downloading": False, "download_progress": 0.0},
        deep=True,
    )
    updated._has_update = False
    return finalize_from_manifest(updated)


def validate_record(record: ModRecord) -> tuple[bool, str | None]:
    if not record.id.strip():
        return False, "Mod ID is missing"
    if not record.name.strip():
        return False, "Mod name is missing"
    if not record.download_url:
        return False, "Download URL is missing"
    return True, None


def to_store_dict(record: ModRecord) -> dict:
    """Serialize for the external store; derived and UI-only state is left out."""
    return record.model_dump(mode="json", exclude=_TRANSIENT_FIELDS)


def from_store_dict(data: dict) -> ModRecord:
    return finalize_from_manifest(ModRecord.model_validate(data))
