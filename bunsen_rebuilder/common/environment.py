"""
Environment validation module
"""

import os
import sys
import logging
from pathlib import Path

import requests

from bunsen_rebuilder.common.errors import PreconditionError

logger = logging.getLogger(__name__)


class EnvironmentValidator:
    """Pre-flight checks; each raises PreconditionError on failure"""

    @staticmethod
    def check_terminal(streams=None):
        """stdin, stdout and stderr must all be attached to a terminal"""
        streams = streams or (sys.stdin, sys.stdout, sys.stderr)
        for stream in streams:
            isatty = getattr(stream, 'isatty', None)
            if isatty is None or not isatty():
                raise PreconditionError("This program must be run from an interactive terminal")

    @staticmethod
    def check_not_root(geteuid=os.geteuid):
        """Refuse to run as root; privileged steps elevate through sudo"""
        if geteuid() == 0:
            raise PreconditionError(
                "Do not run this program as root; it uses sudo for the steps that need it"
            )

    @staticmethod
    def check_network(url: str, timeout: int = 30, session=None):
        """The hosting service must be reachable"""
        http = session or requests
        try:
            response = http.head(url, timeout=timeout, allow_redirects=True)
        except requests.exceptions.RequestException as e:
            raise PreconditionError(f"No network connection to {url}", diagnostic=str(e)) from e
        logger.debug(f"NETWORK_OK url={url} status={response.status_code}")

    @staticmethod
    def check_local_repository(repo_dir: Path, sources_list: Path):
        """The local repository and its APT sources entry must already exist"""
        repo_dir = Path(repo_dir)
        if not repo_dir.is_dir():
            raise PreconditionError(
                f"Local repository {repo_dir} does not exist; add a package with --add first"
            )
        if not Path(sources_list).is_file():
            raise PreconditionError(
                f"APT sources entry {sources_list} is missing; add a package with --add first"
            )

    @classmethod
    def validate_env(cls, config: dict, require_repository: bool, streams=None):
        """Comprehensive pre-flight environment validation"""
        cls.check_terminal(streams)
        cls.check_not_root()
        cls.check_network(config['connectivity_url'], config.get('http_timeout', 30))
        if require_repository:
            cls.check_local_repository(config['local_repo_dir'], config['sources_list'])
        logger.info("✅ Environment validation passed")
