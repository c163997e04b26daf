"""
Upgrade scanner - decides which source repositories need a rebuild
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from bunsen_rebuilder.common.errors import RebuilderError

logger = logging.getLogger(__name__)


class RebuildSet:
    """Deduplicated, grow-only set of repository ids"""

    def __init__(self, repositories=()):
        self._items: Dict[str, None] = {}
        for repository in repositories:
            self.add(repository)

    def add(self, repository: str):
        self._items.setdefault(repository, None)

    def __contains__(self, repository) -> bool:
        return repository in self._items

    def __iter__(self):
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"RebuildSet({list(self._items)!r})"


@dataclass
class ScanResult:
    rebuild_set: RebuildSet = field(default_factory=RebuildSet)
    # package name -> error that prevented the check
    unchecked: Dict[str, RebuilderError] = field(default_factory=dict)
    up_to_date: List[str] = field(default_factory=list)
    upgrades: Dict[str, str] = field(default_factory=dict)

    @property
    def nothing_to_do(self) -> bool:
        return not self.rebuild_set


class UpgradeScanner:
    """Compares installed versions against the newest changelog entry upstream"""

    def __init__(self, resolver, changelog_client, version_manager):
        self.resolver = resolver
        self.changelog_client = changelog_client
        self.version_manager = version_manager

    def scan(self, records) -> ScanResult:
        result = ScanResult()
        # one fetch per repository; a failure is remembered for its other packages
        remote_versions: Dict[str, object] = {}

        for record in records:
            if not record.is_installed:
                logger.debug(f"SCAN_SKIP pkg={record.name} status={record.status}")
                continue

            repository = self.resolver.resolve(record.name)

            if repository not in remote_versions:
                try:
                    remote_versions[repository] = self.changelog_client.fetch_latest_version(repository)
                except RebuilderError as e:
                    remote_versions[repository] = e

            remote = remote_versions[repository]
            if isinstance(remote, RebuilderError):
                logger.warning(f"⚠️ Could not check {record.name} ({repository}): {remote}")
                result.unchecked[record.name] = remote
                continue

            if self.version_manager.is_newer(remote, record.installed_version):
                logger.info(f"🔄 {record.name}: {record.installed_version} -> {remote} (repository {repository})")
                result.rebuild_set.add(repository)
                result.upgrades[record.name] = remote
            else:
                logger.info(f"✅ {record.name}: Up-to-date ({record.installed_version})")
                result.up_to_date.append(record.name)

        logger.info(
            f"SCAN_RESULT rebuild={len(result.rebuild_set)} "
            f"up_to_date={len(result.up_to_date)} unchecked={len(result.unchecked)}"
        )
        return result
