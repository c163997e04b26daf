"""
Local Builder Module - Runs dpkg-buildpackage on a prepared source tree
"""

import logging
from pathlib import Path

from bunsen_rebuilder.common.errors import ToolError

logger = logging.getLogger(__name__)

BUILD_CMD = ['dpkg-buildpackage', '-us', '-uc', '-rfakeroot']

TAIL_LINES = 200


def _tail(text: str, lines: int = TAIL_LINES) -> str:
    return "\n".join((text or "").splitlines()[-lines:])


class LocalBuilder:
    """Handles local package building operations"""

    def __init__(self, shell_executor, timeout: int = 3600):
        self.shell_executor = shell_executor
        self.timeout = timeout

    def build(self, source_dir: Path):
        """
        Build binary packages; they land in the parent of source_dir

        Raises:
            ToolError: dpkg-buildpackage failed or timed out
        """
        source_dir = Path(source_dir)
        logger.info(f"🔨 Building {source_dir.name}...")

        result = self.shell_executor.run_command(
            BUILD_CMD,
            cwd=source_dir,
            check=False,
            timeout=self.timeout,
            log_cmd=True,
        )

        if result.returncode != 0:
            logger.error(f"❌ Build failed with exit code: {result.returncode}")
            logger.error("=== DPKG-BUILDPACKAGE FAILURE DIAGNOSTICS ===")
            logger.error(f"Command: {' '.join(BUILD_CMD)}")
            logger.error(f"Working directory: {source_dir}")
            for line in _tail(result.stdout).splitlines():
                if line.strip():
                    logger.error(f"  {line}")
            raise ToolError(
                f"dpkg-buildpackage failed for {source_dir.name} (exit code {result.returncode})",
                diagnostic=_tail(result.stderr) or _tail(result.stdout, 40),
                command=BUILD_CMD,
                returncode=result.returncode,
            )

        logger.info(f"✅ Build finished: {source_dir.name}")
        return result
