"""
Dependency Installer Module - Build dependency installation through mk-build-deps
"""

import logging
from pathlib import Path

from bunsen_rebuilder.common.errors import StateError, ToolError

logger = logging.getLogger(__name__)

APT_TOOL = 'apt-get -o Debug::pkgProblemResolver=yes --no-install-recommends -y'


class DependencyInstaller:
    """Installs build dependencies as a temporary helper meta-package and removes it again"""

    def __init__(self, shell_executor, apt_client, package_query, timeout: int = 1800):
        self.shell_executor = shell_executor
        self.apt_client = apt_client
        self.package_query = package_query
        self.timeout = timeout

    def remove_helper(self, helper_package: str, reason: str = "stale"):
        """
        Purge the helper meta-package if it is installed

        Raises:
            StateError: the helper is installed and cannot be removed
        """
        if not self.package_query.is_installed(helper_package):
            return

        logger.info(f"DEP_HELPER_REMOVE pkg={helper_package} reason={reason}")
        try:
            self.apt_client.purge([helper_package])
        except ToolError as e:
            raise StateError(
                f"Cannot remove build helper package {helper_package}",
                diagnostic=e.describe(),
            ) from e

    def install_build_dependencies(self, source_dir: Path, helper_package: str):
        """
        Install Build-Depends of debian/control

        A helper left over from an aborted run is removed first.

        Raises:
            StateError: stale helper cannot be removed
            ToolError: mk-build-deps failed
        """
        self.remove_helper(helper_package)

        source_dir = Path(source_dir)
        logger.info(f"📦 Installing build dependencies for {source_dir.name}...")
        self.shell_executor.run_command(
            ['mk-build-deps', '--install', '--remove', '--root-cmd', 'sudo',
             '--tool', APT_TOOL, 'debian/control'],
            cwd=source_dir,
            check=True,
            timeout=self.timeout,
            log_cmd=True,
        )
        logger.info(f"DEP_INSTALL_OK=1 src={source_dir.name}")
