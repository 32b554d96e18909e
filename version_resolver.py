"""
Loose version parsing and comparison for mod manifests.

Manifest authors write versions however they like ("v2.3.1-beta",
"1.2", "Release 4.0.1", "nightly").  The resolver pulls the first dotted
numeric run out of the string and compares those runs component-wise,
treating missing trailing components as zero.  When either side has no
numeric run at all the comparison degrades to a case-insensitive equality
check that only reports "same" or "different".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

FALLBACK_VERSION = "0.0.0"

_DIGITS = frozenset("0123456789")


class VersionOrder(enum.Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class ParsedVersion:
    components: tuple[int, ...]

    @property
    def component_count(self) -> int:
        return len(self.components)

    def padded(self, width: int) -> tuple[int, ...]:
        return self.components + (0,) * (width - len(self.components))

    def __str__(self) -> str:
        return ".".join(str(c) for c in self.components)


def _scan_dotted_run(text: str, start: int) -> tuple[list[str], int]:
    """Read ``digits(.digits)*`` beginning at ``start``.

    Returns the digit groups and the index just past the run.  A trailing
    dot that is not followed by a digit is not part of the run.
    """
    groups: list[str] = []
    i = start
    n = len(text)
    while True:
        j = i
        while j < n and text[j] in _DIGITS:
            j += 1
        groups.append(text[i:j])
        if j + 1 < n and text[j] == "." and text[j + 1] in _DIGITS:
            i = j + 1
            continue
        return groups, j


def _find_run(text: str) -> tuple[int, int, list[str]] | None:
    i = 0
    n = len(text)
    while i < n:
        if text[i] not in _DIGITS:
            i += 1
            continue
        groups, end = _scan_dotted_run(text, i)
        if len(groups) >= 2:
            return i, end, groups
        i = end
    return None


def parse(raw: str | None) -> ParsedVersion | None:
    """Extract the first run of at least two dot-separated digit groups.

    ``"v2.3.1-beta"`` -> ``(2, 3, 1)``; ``"build 7"`` -> ``None`` (a lone
    number is not a version run).
    """
    if not raw:
        return None
    found = _find_run(raw)
    if found is None:
        return None
    return ParsedVersion(tuple(int(g) for g in found[2]))


def clean(raw: str | None) -> str:
    if not raw:
        return FALLBACK_VERSION
    found = _find_run(raw)
    if found is None:
        return FALLBACK_VERSION
    # original digit spelling is kept, "1.02" stays "1.02"
    start, end, _ = found
    return raw[start:end]


def compare(a: str | None, b: str | None) -> VersionOrder:
    """Order ``a`` relative to ``b``.

    In the non-numeric fallback GREATER only means "different"; it makes
    no claim about which side is newer.
    """
    left = parse(a)
    right = parse(b)
    if left is None or right is None:
        if (a or "").strip().casefold() == (b or "").strip().casefold():
            return VersionOrder.EQUAL
        return VersionOrder.GREATER

    width = max(left.component_count, right.component_count)
    lhs = left.padded(width)
    rhs = right.padded(width)
    if lhs < rhs:
        return VersionOrder.LESS
    if lhs > rhs:
        return VersionOrder.GREATER
    return VersionOrder.EQUAL


def has_update(latest: str | None, installed: str | None) -> bool:
    return compare(latest, installed) is not VersionOrder.EQUAL
