"""
Package Builder Module - Main orchestrator for the upgrade and add workflows
"""

import logging
from typing import Iterable

from bunsen_rebuilder.build.artifact_manager import ArtifactManager
from bunsen_rebuilder.build.changelog_client import ChangelogClient
from bunsen_rebuilder.build.dependency_installer import DependencyInstaller
from bunsen_rebuilder.build.local_builder import LocalBuilder
from bunsen_rebuilder.build.source_fetcher import SourceFetcher
from bunsen_rebuilder.build.source_inspector import SourceInspector
from bunsen_rebuilder.build.version_manager import VersionManager
from bunsen_rebuilder.common.errors import RebuilderError
from bunsen_rebuilder.common.shell_executor import ShellExecutor
from bunsen_rebuilder.orchestrator.build_orchestrator import BuildOrchestrator
from bunsen_rebuilder.orchestrator.policy import AbortPolicy
from bunsen_rebuilder.repo.apt_client import AptClient
from bunsen_rebuilder.repo.package_query import PackageQuery
from bunsen_rebuilder.repo.publisher import RepositoryPublisher
from bunsen_rebuilder.repo.resolver import RepositoryResolver
from bunsen_rebuilder.repo.upgrade_scanner import RebuildSet, UpgradeScanner

logger = logging.getLogger(__name__)


def banner(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


class PackageBuilder:
    """Main orchestrator: scan (or take an explicit list), build, publish, install"""

    def __init__(self, config: dict, failure_policy=None, log_file=None):
        self.config = config
        self.debug_mode = config.get('debug_mode', False)
        self.failure_policy = failure_policy or AbortPolicy()
        self.log_file = log_file
        self.report = None

        self.local_repo_dir = config['local_repo_dir']
        self.build_output_dir = config['build_output_dir']

        self._init_modules()

    def _init_modules(self):
        config = self.config
        self.shell_executor = ShellExecutor(self.debug_mode)
        self.package_query = PackageQuery(self.shell_executor)
        self.apt_client = AptClient(self.shell_executor, self.package_query, config['apt_timeout'])

        self.resolver = RepositoryResolver(config['overrides'])
        self.version_manager = VersionManager()
        self.changelog_client = ChangelogClient(config['changelog_url'], config['http_timeout'])
        self.scanner = UpgradeScanner(self.resolver, self.changelog_client, self.version_manager)

        self.orchestrator = BuildOrchestrator(
            source_fetcher=SourceFetcher(config['source_archive_url'], config['http_timeout']),
            source_inspector=SourceInspector(config['source_format']),
            dependency_installer=DependencyInstaller(
                self.shell_executor, self.apt_client, self.package_query, config['depends_timeout']
            ),
            local_builder=LocalBuilder(self.shell_executor, config['build_timeout']),
            artifact_manager=ArtifactManager(self.build_output_dir),
            failure_policy=self.failure_policy,
        )
        self.publisher = RepositoryPublisher(self.apt_client)

    def _log_hint(self) -> str:
        return f" (details in {self.log_file})" if self.log_file else ""

    def prepare_repository(self):
        """Create the local repository and its APT sources entry when missing"""
        self.local_repo_dir.mkdir(parents=True, exist_ok=True)
        sources_list = self.config['sources_list']
        if not sources_list.is_file():
            self.apt_client.write_sources_list(sources_list, self.local_repo_dir)

    def build_and_publish(self, rebuild_set):
        """Build every repository, then publish what was produced

        Raises:
            StateError: no artifacts at all
        """
        self.apt_client.ensure_installed(self.config['required_build_tools'])

        banner(f"BUILDING {len(rebuild_set)} REPOSITORIES")
        report = self.orchestrator.build_all(rebuild_set)
        self.report = report

        banner("PUBLISHING TO LOCAL REPOSITORY")
        publish_result = self.publisher.publish(
            report.artifact_names, self.build_output_dir, self.local_repo_dir
        )
        return report, publish_result

    def run_upgrade(self) -> int:
        banner("🚀 UPGRADE: CHECKING INSTALLED PACKAGES FOR NEWER SOURCES")
        try:
            records = self.package_query.list_packages(self.config['package_glob'])
            scan = self.scanner.scan(records)

            for name, error in scan.unchecked.items():
                print(f"⚠️ Could not check {name}: {error}")

            if scan.nothing_to_do:
                if scan.unchecked:
                    print(f"\n⚠️ Nothing to upgrade among {len(scan.up_to_date)} checked packages; "
                          f"{len(scan.unchecked)} could not be checked")
                else:
                    print("\n✅ Nothing to upgrade")
                return 0

            report, publish_result = self.build_and_publish(scan.rebuild_set)

            installed = {r.name for r in records if r.is_installed}
            to_upgrade = [name for name in report.artifact_names if name in installed]
            if to_upgrade:
                banner("UPGRADING INSTALLED PACKAGES")
                self.apt_client.install(to_upgrade, only_upgrade=True)
        except RebuilderError as e:
            logger.error(f"❌ {e.describe()}")
            if self.report is not None:
                self.print_summary(self.report)
            print(f"\n❌ Upgrade failed: {e}{self._log_hint()}")
            return 1

        self.print_summary(report, publish_result)
        return 0

    def run_add(self, repositories: Iterable[str]) -> int:
        rebuild_set = RebuildSet(repositories)
        banner(f"🚀 ADD: {', '.join(rebuild_set)}")
        try:
            self.prepare_repository()
            report, publish_result = self.build_and_publish(rebuild_set)
        except RebuilderError as e:
            logger.error(f"❌ {e.describe()}")
            if self.report is not None:
                self.print_summary(self.report)
            print(f"\n❌ Add failed: {e}{self._log_hint()}")
            return 1

        self.print_summary(report, publish_result)
        print("\nInstall the new packages with: sudo apt-get install "
              + " ".join(report.artifact_names))
        return 0

    def print_summary(self, report, publish_result=None):
        summary = report.get_summary()
        banner("📊 BUILD SUMMARY")
        print(f"Duration:  {summary['elapsed']:.1f}s")
        print(f"Built:     {summary['built']}")
        print(f"Skipped:   {summary['skipped']}")
        print(f"Failed:    {summary['failed']}")
        print(f"Artifacts: {summary['artifacts']}")
        if report.aborted:
            print("⚠️ Run aborted before every repository was attempted")
        for outcome in report.skipped + report.failed:
            print(f"  - {outcome.repository}: {outcome.status.value}: {outcome.reason}")
        if publish_result is not None:
            print("\n📦 Published packages:")
            for path in publish_result.published:
                print(f"  - {path.name}")
