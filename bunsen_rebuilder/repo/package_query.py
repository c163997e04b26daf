"""
Package query - snapshot of installed packages from the dpkg database
"""

import logging
from dataclasses import dataclass
from typing import List

from bunsen_rebuilder.common.errors import ToolError

logger = logging.getLogger(__name__)

INSTALLED = "ii"

QUERY_FORMAT = '${Package}\t${db:Status-Abbrev}\t${Version}\n'


@dataclass(frozen=True)
class PackageRecord:
    name: str
    installed_version: str
    status: str

    @property
    def is_installed(self) -> bool:
        return self.status == INSTALLED


def parse_query_output(output: str) -> List[PackageRecord]:
    """Parse dpkg-query rows of name<TAB>status<TAB>version"""
    records = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split('\t')
        if len(parts) < 3:
            logger.debug(f"QUERY_ROW_SKIPPED row={line!r}")
            continue
        name, status, version = parts[0].strip(), parts[1].strip(), parts[2].strip()
        records.append(PackageRecord(name=name, installed_version=version, status=status))
    return records


class PackageQuery:
    """Thin wrapper around dpkg-query -W"""

    def __init__(self, shell_executor):
        self.shell_executor = shell_executor

    def list_packages(self, pattern: str) -> List[PackageRecord]:
        """
        All packages known to dpkg that match a glob

        Raises:
            ToolError: dpkg-query failed for a reason other than "no match"
        """
        result = self.shell_executor.run_command(
            ['dpkg-query', '-W', '-f', QUERY_FORMAT, pattern],
            check=False,
            timeout=60,
        )

        if result.returncode != 0:
            stderr = result.stderr or ""
            if "no packages found" in stderr.lower():
                logger.info(f"No packages match {pattern}")
                return []
            raise ToolError(
                f"dpkg-query failed for pattern {pattern}",
                diagnostic=stderr,
                command='dpkg-query',
                returncode=result.returncode,
            )

        return parse_query_output(result.stdout or "")

    def is_installed(self, package_name: str) -> bool:
        """True if dpkg reports the package as fully installed"""
        result = self.shell_executor.run_command(
            ['dpkg-query', '-W', '-f', '${db:Status-Abbrev}', package_name],
            check=False,
            timeout=60,
        )
        return result.returncode == 0 and (result.stdout or "").strip() == INSTALLED
