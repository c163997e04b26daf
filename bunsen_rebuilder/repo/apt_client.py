"""
APT client - privileged package manager operations
"""

import logging
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)

APT_GET = ['apt-get', '-y', '-o', 'Dpkg::Use-Pty=0']


class AptClient:
    """apt-get wrapper; every call elevates through sudo"""

    def __init__(self, shell_executor, package_query, timeout: int = 600):
        self.shell_executor = shell_executor
        self.package_query = package_query
        self.timeout = timeout

    def update(self):
        """Refresh package metadata (raises ToolError)"""
        logger.info("🔄 Refreshing APT package metadata...")
        self.shell_executor.run_command_with_retry(
            APT_GET + ['update'], sudo=True, check=True, timeout=self.timeout, log_cmd=True
        )

    def install(self, packages: Iterable[str], only_upgrade: bool = False):
        packages = list(packages)
        if not packages:
            return
        cmd = APT_GET + ['install', '--no-install-recommends']
        if only_upgrade:
            cmd.append('--only-upgrade')
        self.shell_executor.run_command_with_retry(
            cmd + packages, sudo=True, check=True, timeout=self.timeout, log_cmd=True
        )

    def purge(self, packages: Iterable[str]):
        packages = list(packages)
        if not packages:
            return
        self.shell_executor.run_command_with_retry(
            APT_GET + ['purge'] + packages, sudo=True, check=True, timeout=self.timeout, log_cmd=True
        )

    def missing(self, packages: Iterable[str]) -> List[str]:
        return [p for p in packages if not self.package_query.is_installed(p)]

    def ensure_installed(self, packages: Iterable[str]) -> List[str]:
        """Install whatever is not installed yet; returns what was installed"""
        missing = self.missing(packages)
        if missing:
            logger.info(f"📦 Installing build tooling: {', '.join(missing)}")
            self.install(missing)
        return missing

    def write_sources_list(self, sources_list: Path, repo_dir: Path):
        """Point APT at the local flat repository"""
        line = f"deb [trusted=yes] file:{Path(repo_dir).resolve()} ./\n"
        self.shell_executor.run_command(
            ['tee', str(sources_list)], sudo=True, check=True, input_text=line, timeout=60
        )
        logger.info(f"✅ APT source written: {sources_list}")
