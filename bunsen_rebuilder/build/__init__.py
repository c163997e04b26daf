"""
Build module for package building operations
"""

from .artifact_manager import ArtifactManager, BuildArtifact, artifact_base_name
from .build_tracker import BuildOutcome, BuildReport, BuildStatus
from .changelog_client import ChangelogClient, parse_changelog_version
from .dependency_installer import DependencyInstaller
from .local_builder import LocalBuilder
from .source_fetcher import SourceFetcher
from .source_inspector import SourceInfo, SourceInspector
from .version_manager import VersionManager, VersionOrder, compare_versions, upstream_version

__all__ = [
    'ArtifactManager',
    'BuildArtifact',
    'artifact_base_name',
    'BuildOutcome',
    'BuildReport',
    'BuildStatus',
    'ChangelogClient',
    'parse_changelog_version',
    'DependencyInstaller',
    'LocalBuilder',
    'SourceFetcher',
    'SourceInfo',
    'SourceInspector',
    'VersionManager',
    'VersionOrder',
    'compare_versions',
    'upstream_version',
]
