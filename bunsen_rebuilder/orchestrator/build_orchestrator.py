"""
Build Orchestrator Module - Builds every repository of a rebuild set with per-repository isolation
"""

import logging
import tempfile
from pathlib import Path

from bunsen_rebuilder.build.build_tracker import BuildOutcome, BuildReport
from bunsen_rebuilder.common.errors import FormatError, ParseError, RebuilderError, StateError
from bunsen_rebuilder.orchestrator.policy import AbortPolicy

logger = logging.getLogger(__name__)

# packaging problems: the repository is skipped, not broken
SKIP_ERRORS = (FormatError, ParseError)


class BuildOrchestrator:
    """Fetch, validate, build and collect artifacts for each repository in turn"""

    def __init__(self, source_fetcher, source_inspector, dependency_installer,
                 local_builder, artifact_manager, failure_policy=None, workspace_root=None):
        self.source_fetcher = source_fetcher
        self.source_inspector = source_inspector
        self.dependency_installer = dependency_installer
        self.local_builder = local_builder
        self.artifact_manager = artifact_manager
        self.failure_policy = failure_policy or AbortPolicy()
        self.workspace_root = workspace_root

    def build_all(self, rebuild_set) -> BuildReport:
        report = BuildReport()
        repositories = list(rebuild_set)

        for index, repository in enumerate(repositories):
            print(f"\n--- Processing: {repository} ({index + 1}/{len(repositories)}) ---")
            outcome = self.build_one(repository)
            report.record(outcome)

            if outcome.error is None:
                continue

            remaining = len(repositories) - index - 1
            if remaining == 0:
                break
            if not self.failure_policy.should_continue(outcome, remaining):
                logger.error(f"❌ Aborting: {remaining} repositories not attempted")
                report.aborted = True
                break

        return report

    def build_one(self, repository: str) -> BuildOutcome:
        """Run every build step for one repository inside its own temporary workspace"""
        try:
            with tempfile.TemporaryDirectory(prefix=f"bunsen-rebuilder-{repository}-",
                                             dir=self.workspace_root) as workspace:
                artifacts = self._build_in_workspace(repository, Path(workspace))
        except SKIP_ERRORS as e:
            logger.warning(f"⚠️ {repository}: skipped: {e}")
            return BuildOutcome.skipped(repository, e)
        except RebuilderError as e:
            logger.error(f"❌ {repository}: {e.describe()}")
            return BuildOutcome.failed(repository, e)
        except OSError as e:
            error = StateError(f"{repository}: filesystem error during build", diagnostic=str(e))
            logger.error(f"❌ {error.describe()}")
            return BuildOutcome.failed(repository, error)
        except Exception as e:
            # one broken repository must not take down the rest of the set
            logger.exception(f"❌ {repository}: unexpected error during build")
            error = StateError(f"{repository}: unexpected error during build",
                               diagnostic=f"{type(e).__name__}: {e}")
            return BuildOutcome.failed(repository, error)

        return BuildOutcome.built(repository, artifacts)

    def _build_in_workspace(self, repository: str, workspace: Path):
        archive = self.source_fetcher.download(repository, workspace)
        source_dir = self.source_fetcher.extract(archive, workspace)

        info = self.source_inspector.inspect(source_dir)
        source_dir = self.source_inspector.prepare_orig(source_dir, info)

        self.dependency_installer.install_build_dependencies(source_dir, info.helper_package)
        try:
            self.local_builder.build(source_dir)
        finally:
            self._remove_helper_after_build(info.helper_package)

        artifacts = self.artifact_manager.move_built_packages(source_dir.parent, repository)
        if not artifacts:
            raise StateError(f"{repository}: build succeeded but produced no .deb files")
        return artifacts

    def _remove_helper_after_build(self, helper_package: str):
        try:
            self.dependency_installer.remove_helper(helper_package, reason="post-build")
        except StateError as e:
            # next run removes it as a stale helper
            logger.warning(f"⚠️ {e.describe()}")
