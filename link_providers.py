"""
Platform strategies for directory links.

Windows gets directory junctions (``mklink /J``), which need no admin
rights.  Linux and macOS get symbolic links (``ln -s``).  Exactly one
provider is picked per process by ``select_provider``; nothing branches
on the platform per call.

Providers assume the link path is absent when ``create`` runs (the
LinkManager guarantees that).  If the tool fails, whatever entry it left
at the link path is removed again before the error propagates.
"""

from __future__ import annotations

import enum
import functools
import logging
import os
import stat
import subprocess
import sys
from abc import ABC, abstractmethod

from link_errors import ProviderFailureError, SpawnFailureError

_log = logging.getLogger(__name__)

CMD_TOOL = "cmd.exe"
LN_TOOL = "ln"
READLINK_TOOL = "readlink"

# prefixes os.readlink reports for junction targets
_NT_PATH_PREFIXES = ("\\\\?\\", "\\??\\")


class LinkKind(enum.Enum):
    WINDOWS_JUNCTION = "windows_junction"
    POSIX_SYMLINK = "posix_symlink"
    PLAIN_DIRECTORY = "plain_directory"
    PLAIN_FILE = "plain_file"
    ABSENT = "absent"


class LinkProvider(ABC):
    kind: LinkKind

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    @abstractmethod
    def create(self, link: str, target: str) -> None:
        """Create a link entry at ``link`` resolving to ``target``."""

    @abstractmethod
    def is_link(self, path: str) -> bool:
        """True if ``path`` itself is a link entry.  May raise OSError."""

    @abstractmethod
    def read_target(self, path: str) -> str | None:
        """Raw target of the link at ``path``.  May raise OSError."""

    @abstractmethod
    def remove_link(self, path: str) -> None:
        """Delete the link entry only, never what it points at."""

    def _run_tool(self, args: list[str], tool: str, hint: str) -> str:
        """Run a link tool, returning its combined output.

        Raises SpawnFailureError if the process cannot start and
        ProviderFailureError on a non-zero exit or timeout.
        """
        _log.debug("Running %s", " ".join(args))
        try:
            proc = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
            )
        except OSError as exc:
            raise SpawnFailureError(tool, hint) from exc

        try:
            output, _ = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            raise ProviderFailureError(f"{tool} timed out after {self.timeout}s")

        output = (output or "").strip()
        if proc.returncode != 0:
            for line in output.splitlines()[-10:]:
                _log.debug("  [%s] %s", tool, line)
            raise ProviderFailureError(
                f"{tool} failed with exit code {proc.returncode}",
                detail=output,
                exit_code=proc.returncode,
            )
        return output

    def _create_with_cleanup(self, link: str, args: list[str], tool: str, hint: str) -> None:
        try:
            self._run_tool(args, tool, hint)
        except ProviderFailureError:
            self._discard_partial(link)
            raise

    def _discard_partial(self, link: str) -> None:
        if not os.path.lexists(link):
            return
        try:
            if self.is_link(link):
                self.remove_link(link)
            elif os.path.isdir(link) and not os.listdir(link):
                os.rmdir(link)
            else:
                return
        except OSError as exc:
            _log.warning("Could not clean up partial link at %s: %s", link, exc)
            return
        _log.debug("Removed partial link entry: %s", link)


class WindowsJunctionProvider(LinkProvider):
    kind = LinkKind.WINDOWS_JUNCTION

    def create(self, link: str, target: str) -> None:
        self._create_with_cleanup(
            link,
            [CMD_TOOL, "/c", "mklink", "/J", link, target],
            tool="mklink",
            hint="Administrator privileges may be required.",
        )

    def is_link(self, path: str) -> bool:
        attrs = getattr(os.lstat(path), "st_file_attributes", 0)
        return bool(attrs & stat.FILE_ATTRIBUTE_REPARSE_POINT)

    def read_target(self, path: str) -> str | None:
        target = os.readlink(path)
        for prefix in _NT_PATH_PREFIXES:
            if target.startswith(prefix):
                return target[len(prefix):]
        return target

    def remove_link(self, path: str) -> None:
        # rmdir on a junction drops the reparse point and leaves the target alone
        try:
            os.rmdir(path)
        except NotADirectoryError:
            os.unlink(path)


class PosixSymlinkProvider(LinkProvider):
    kind = LinkKind.POSIX_SYMLINK

    def __init__(self, timeout: float | None = None, native_readlink: bool | None = None):
        super().__init__(timeout)
        if native_readlink is None:
            native_readlink = hasattr(os, "readlink")
        self.native_readlink = native_readlink

    def create(self, link: str, target: str) -> None:
        self._create_with_cleanup(
            link,
            [LN_TOOL, "-s", target, link],
            tool="ln",
            hint="Check write permission on the parent directory.",
        )

    def is_link(self, path: str) -> bool:
        return stat.S_ISLNK(os.lstat(path).st_mode)

    def read_target(self, path: str) -> str | None:
        if self.native_readlink:
            return os.readlink(path)
        try:
            output = self._run_tool([READLINK_TOOL, path], tool="readlink", hint="Check that coreutils is installed.")
        except (SpawnFailureError, ProviderFailureError) as exc:
            _log.debug("readlink failed for %s: %s", path, exc)
            return None
        return output or None

    def remove_link(self, path: str) -> None:
        os.unlink(path)


_PROVIDERS: dict[str, type[LinkProvider]] = {
    "win32": WindowsJunctionProvider,
    "linux": PosixSymlinkProvider,
    "darwin": PosixSymlinkProvider,
}


def provider_class_for(platform: str) -> type[LinkProvider] | None:
    return _PROVIDERS.get(platform)


@functools.lru_cache(maxsize=None)
def _detected_provider_class() -> type[LinkProvider] | None:
    cls = provider_class_for(sys.platform)
    _log.debug("Platform %s -> %s", sys.platform, cls.__name__ if cls else "no link provider")
    return cls


def select_provider(timeout: float | None = None) -> LinkProvider | None:
    """Instantiate the provider for the running platform, or None if there is none."""
    cls = _detected_provider_class()
    return cls(timeout=timeout) if cls else None
