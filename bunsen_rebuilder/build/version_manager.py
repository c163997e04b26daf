"""
Version Manager Module - Handles version parsing and comparison with dpkg ordering
"""

import logging
import re
from enum import Enum
from typing import NamedTuple, Optional

from debian import debian_support

logger = logging.getLogger(__name__)

_EPOCH_RE = re.compile(r'^\d+$')
_VALID_RE = re.compile(r'^[A-Za-z0-9.+~:-]+$')


class VersionOrder(Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


class DebianVersion(NamedTuple):
    epoch: int
    upstream: str
    revision: str


def parse_version(version: str) -> Optional[DebianVersion]:
    """
    Split [epoch:]upstream[-revision].

    The epoch ends at the first colon, the revision starts after the last
    hyphen. Returns None for strings dpkg would refuse (empty, bad epoch,
    characters outside the allowed set).
    """
    if version is None:
        return None
    version = version.strip()
    if not version or not _VALID_RE.match(version):
        return None

    epoch = 0
    rest = version
    if ':' in version:
        epoch_str, rest = version.split(':', 1)
        if not _EPOCH_RE.match(epoch_str):
            return None
        epoch = int(epoch_str)

    revision = ""
    if '-' in rest:
        rest, revision = rest.rsplit('-', 1)
        if not revision:
            return None

    if not rest or not rest[0].isdigit():
        return None

    return DebianVersion(epoch, rest, revision)


def _to_debian_version(version: str) -> Optional[debian_support.Version]:
    if parse_version(version) is None:
        return None
    try:
        return debian_support.Version(version.strip())
    except ValueError:
        return None


def compare_versions(a: str, b: str) -> int:
    """
    Compare two version strings with dpkg ordering.

    Returns -1, 0 or 1. Unparseable versions sort below every valid one and
    compare equal to each other.
    """
    va = _to_debian_version(a)
    vb = _to_debian_version(b)

    if va is None or vb is None:
        if va is None and vb is None:
            return 0
        return -1 if va is None else 1

    return debian_support.version_compare(va, vb)


def upstream_version(version: str) -> str:
    """
    Strip the epoch and the Debian revision from a changelog version.

    Only the last hyphen separates the revision, so "1.0-beta-2" yields
    "1.0-beta".
    """
    version = version.strip()
    if ':' in version:
        version = version.split(':', 1)[1]
    if '-' in version:
        version = version.rsplit('-', 1)[0]
    return version


class VersionManager:
    """Handles package version comparison and upgrade decisions"""

    def compare(self, a: str, b: str) -> VersionOrder:
        """Compare two version strings, returning a VersionOrder"""
        return VersionOrder(compare_versions(a, b))

    def is_newer(self, candidate: str, installed: str) -> bool:
        """True if candidate sorts strictly after installed"""
        order = self.compare(candidate, installed)
        logger.debug(f"[VERSION_COMPARE] candidate={candidate} installed={installed} result={order.name}")
        return order is VersionOrder.GREATER
