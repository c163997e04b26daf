"""
Artifact manager - handles built package files
"""

import shutil
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

PACKAGE_SUFFIX = ".deb"


def artifact_base_name(filename: str) -> str:
    """Logical artifact name: the file name up to the first underscore"""
    return Path(filename).name.split('_', 1)[0]


def artifact_version(filename: str) -> str:
    """Version field of <name>_<version>_<arch>.deb"""
    parts = Path(filename).name.split('_')
    return parts[1] if len(parts) > 2 else ""


@dataclass(frozen=True)
class BuildArtifact:
    base_name: str
    version: str
    file_path: Path
    repository: str


class ArtifactManager:
    """Manages package artifacts and files"""

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)

    def move_built_packages(self, source_dir, repository: str) -> List[BuildArtifact]:
        """Move .deb files from source_dir into the build output directory"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        artifacts = []

        for pkg_file in sorted(Path(source_dir).glob(f"*{PACKAGE_SUFFIX}")):
            dest = self.output_dir / pkg_file.name
            shutil.move(str(pkg_file), str(dest))
            logger.info(f"✅ Built: {pkg_file.name}")

            artifacts.append(BuildArtifact(
                base_name=artifact_base_name(pkg_file.name),
                version=artifact_version(pkg_file.name),
                file_path=dest,
                repository=repository,
            ))

        return artifacts
