"""
Yellowcake - Directory link management

Grafts a mod directory held in the managed repository into the game's
plugin tree without copying files.  LinkManager validates paths, applies
the overwrite policy and delegates the platform work to a LinkProvider.

The filesystem is the only source of truth: nothing about link state is
cached between calls.  Operations on the same link path must be
serialized by the caller; distinct paths are independent.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from link_errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    PlatformUnsupportedError,
    ProviderFailureError,
    TargetNotFoundError,
)
from link_providers import LinkKind, LinkProvider, select_provider

_log = logging.getLogger(__name__)

PathLike = str | os.PathLike


@dataclass(frozen=True)
class LinkPoint:
    path: str
    target_path: str | None
    kind: LinkKind

    @property
    def is_link(self) -> bool:
        return self.kind in (LinkKind.WINDOWS_JUNCTION, LinkKind.POSIX_SYMLINK)


def normalize_path(path: PathLike, label: str = "Link") -> str:
    """Absolute form of ``path`` with trailing separators dropped.

    Equivalent spellings ("mods/a/", "./mods/a") normalize to the same
    string, so repeated calls produce identical on-disk state.
    """
    text = os.fspath(path)
    if not text or not text.strip():
        raise InvalidArgumentError(f"{label} path cannot be empty.")
    return os.path.abspath(text)


def _is_within(path: str, root: str) -> bool:
    return Path(path).is_relative_to(root)


class LinkManager:
    """
    Platform-agnostic front end for directory links.

    Workflow:
        1. create(link, target) once the target directory is fully populated
        2. inspect() / get_target() to check what a path currently is
        3. remove(link) before the backing directory is moved or deleted
    """

    def __init__(
        self,
        provider: LinkProvider | None = None,
        *,
        detect: bool = True,
        timeout: float | None = None,
    ):
        if provider is None and detect:
            provider = select_provider(timeout)
        self.provider = provider
        self._unsupported_reported = False

    @property
    def is_supported(self) -> bool:
        return self.provider is not None

    def _require_provider(self) -> LinkProvider:
        if self.provider is None:
            if not self._unsupported_reported:
                _log.error("No directory link provider for platform %s", sys.platform)
                self._unsupported_reported = True
            raise PlatformUnsupportedError(sys.platform)
        return self.provider

    # ── Creation ──────────────────────────────────────────────────────

    def create(self, link_path: PathLike, target_dir: PathLike, overwrite: bool = False) -> None:
        """Make ``link_path`` a link to ``target_dir``.

        With ``overwrite`` whatever is at ``link_path`` is removed first,
        which makes repeated calls idempotent.
        """
        link = normalize_path(link_path, "Link")
        target = normalize_path(target_dir, "Target")

        if not Path(target).is_dir():
            raise TargetNotFoundError(target)
        if _is_within(target, link):
            raise InvalidArgumentError(
                f"Target {target} lies inside the link path {link}; replacing the link would destroy it."
            )

        provider = self._require_provider()

        if os.path.lexists(link):
            if not overwrite:
                raise AlreadyExistsError(link)
            self.remove(link)

        self._ensure_parent(link)
        provider.create(link, target)

        if not self.is_symbolic_link(link):
            raise ProviderFailureError(
                f"Link tool reported success but no link exists at {link}"
            )
        _log.info("Created %s: %s -> %s", provider.kind.value, link, target)

    @staticmethod
    def _ensure_parent(link: str) -> None:
        parent = Path(link).parent
        if parent.is_dir():
            return
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _log.error("Failed to create parent directory %s: %s", parent, exc)
            raise ProviderFailureError(
                f"Failed to create parent directory {parent}", detail=str(exc)
            ) from exc
        _log.debug("Created parent directory: %s", parent)

    # ── Removal ───────────────────────────────────────────────────────

    def remove(self, link_path: PathLike) -> None:
        """Remove whatever is at ``link_path``.

        A link loses only its own entry; its target is never touched.  A
        plain directory is deleted recursively.  Nothing there is a no-op.
        """
        path = Path(normalize_path(link_path, "Link"))
        if not os.path.lexists(path):
            return

        try:
            if self.is_symbolic_link(path):
                self._remove_link_entry(str(path))
                _log.info("Removed link: %s", path)
            elif path.is_dir():
                shutil.rmtree(path)
                _log.info("Removed directory: %s", path)
            else:
                path.unlink()
                _log.info("Removed file: %s", path)
        except OSError as exc:
            _log.error("Failed to remove link point %s: %s", path, exc)
            raise ProviderFailureError(f"Failed to remove {path}", detail=str(exc)) from exc

    def _remove_link_entry(self, path: str) -> None:
        if self.provider is not None:
            self.provider.remove_link(path)
        else:
            os.unlink(path)

    # ── Introspection ─────────────────────────────────────────────────

    def is_symbolic_link(self, path: PathLike) -> bool:
        try:
            text = os.fspath(path)
            if not text.strip() or not os.path.lexists(text):
                return False
            if self.provider is None:
                return os.path.islink(text)
            return self.provider.is_link(text)
        except (OSError, TypeError, ValueError) as exc:
            _log.debug("Error checking if path is a link: %s (%s)", path, exc)
            return False

    def get_target(self, link_path: PathLike) -> str | None:
        if not self.is_symbolic_link(link_path):
            return None
        try:
            text = os.fspath(link_path)
            if self.provider is None:
                return os.readlink(text)
            return self.provider.read_target(text)
        except (OSError, ValueError) as exc:
            _log.debug("Failed to get link target for %s: %s", link_path, exc)
            return None

    def inspect(self, path: PathLike) -> LinkPoint:
        try:
            text = os.fspath(path)
            present = bool(text.strip()) and os.path.lexists(text)
        except (OSError, TypeError, ValueError) as exc:
            _log.debug("Error inspecting %s: %s", path, exc)
            return LinkPoint(str(path), None, LinkKind.ABSENT)

        if not present:
            return LinkPoint(text, None, LinkKind.ABSENT)
        if self.is_symbolic_link(text):
            kind = self.provider.kind if self.provider else LinkKind.POSIX_SYMLINK
            return LinkPoint(text, self.get_target(text), kind)
        if os.path.isdir(text):
            return LinkPoint(text, None, LinkKind.PLAIN_DIRECTORY)
        return LinkPoint(text, None, LinkKind.PLAIN_FILE)
