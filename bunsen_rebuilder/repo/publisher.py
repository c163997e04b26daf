"""
Repository publisher - merges new artifacts into the local repository and refreshes APT
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from bunsen_rebuilder.common.errors import StateError
from bunsen_rebuilder.repo.database_manager import DatabaseManager

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    published: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)
    index_path: Path = None


class RepositoryPublisher:
    """Replaces superseded packages, rewrites the index and triggers an APT refresh"""

    def __init__(self, apt_client=None):
        self.apt_client = apt_client

    @staticmethod
    def newest_match(directory: Path, name: str):
        """Most recently modified <name>_*.deb in directory, or None"""
        candidates = [p for p in Path(directory).glob(f"{name}_*.deb") if p.is_file()]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.stat().st_mtime)

    def publish(self, artifact_names: Iterable[str], build_output_dir, local_repo_dir) -> PublishResult:
        """
        Publish the newest build of every named artifact

        Raises:
            StateError: nothing was built, or a named artifact has no readable file in the build output
            ToolError: the APT metadata refresh failed
        """
        names = list(dict.fromkeys(artifact_names))
        if not names:
            raise StateError("No packages were produced by this run; nothing to publish")

        build_output_dir = Path(build_output_dir)
        local_repo_dir = Path(local_repo_dir)
        local_repo_dir.mkdir(parents=True, exist_ok=True)

        sources = {}
        for name in names:
            newest = self.newest_match(build_output_dir, name)
            if newest is None:
                raise StateError(f"No built package file for {name} in {build_output_dir}")
            sources[name] = newest

        database = DatabaseManager(local_repo_dir)
        # an unreadable build is refused before the repository is touched
        for newest in sources.values():
            database.read_control(newest)

        result = PublishResult()
        try:
            for name, newest in sources.items():
                for old in sorted(local_repo_dir.glob(f"{name}_*.deb")):
                    old.unlink()
                    result.removed.append(old)
                    logger.info(f"🗑️ Removed superseded: {old.name}")

                dest = local_repo_dir / newest.name
                shutil.copy2(newest, dest)
                result.published.append(dest)
                logger.info(f"📦 Published: {newest.name}")
        finally:
            # the index always describes what is on disk, even after a partial copy
            result.index_path = database.generate_index()

        if self.apt_client is not None:
            self.apt_client.update()

        return result
