"""
Shared fixtures and helpers for the Yellowcake core test suite.
"""

import os
import subprocess
import sys

import pytest

from link_providers import LinkKind, LinkProvider

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX symlinks")


class RecordingProvider(LinkProvider):
    """In-process provider backed by os.symlink, with switchable failures."""

    kind = LinkKind.POSIX_SYMLINK

    def __init__(self, fail_with: Exception | None = None, create_nothing: bool = False):
        super().__init__()
        self.calls: list[tuple] = []
        self.fail_with = fail_with
        self.create_nothing = create_nothing

    def create(self, link, target):
        self.calls.append(("create", link, target))
        if self.fail_with is not None:
            raise self.fail_with
        if not self.create_nothing:
            os.symlink(target, link)

    def is_link(self, path):
        return os.path.islink(path)

    def read_target(self, path):
        return os.readlink(path)

    def remove_link(self, path):
        self.calls.append(("remove", path))
        os.unlink(path)


def fake_popen(returncode=0, output="", side_effect=None):
    """Build a stand-in for subprocess.Popen that records its invocations.

    ``side_effect`` is called with the argv before the process "runs"; if
    it raises, Popen itself raises (as when the executable is missing).
    """
    calls = []

    class _FakeProcess:
        def __init__(self, args, **kwargs):
            calls.append((list(args), kwargs))
            if side_effect is not None:
                side_effect(args)
            self.returncode = None
            self.killed = False

        def communicate(self, input=None, timeout=None):
            self.returncode = returncode
            return output, None

        def kill(self):
            self.killed = True

    _FakeProcess.calls = calls
    return _FakeProcess


class HangingProcess:
    """Popen stand-in whose first communicate() times out."""

    instances: list = []

    def __init__(self, args, **kwargs):
        self.args = list(args)
        self.returncode = None
        self.killed = False
        self._waits = 0
        HangingProcess.instances.append(self)

    def communicate(self, input=None, timeout=None):
        self._waits += 1
        if self._waits == 1:
            raise subprocess.TimeoutExpired(self.args, timeout)
        self.returncode = -9
        return "", None

    def kill(self):
        self.killed = True


@pytest.fixture
def dirs(tmp_path):
    """Return (repo_mod_dir, game_plugins_dir): a populated mod directory and an empty plugin tree."""
    repo = tmp_path / "repo" / "cool-mod"
    plugins = tmp_path / "game" / "BepInEx" / "plugins"
    repo.mkdir(parents=True)
    plugins.mkdir(parents=True)
    (repo / "CoolMod.dll").write_bytes(b"dll")
    (repo / "config").mkdir()
    (repo / "config" / "cool.cfg").write_text("[General]\n", encoding="utf-8")
    return repo, plugins


@pytest.fixture
def recording_provider():
    return RecordingProvider()
