"""
Changelog Client - Fetch the newest upstream version without downloading sources
"""

import logging
import re

import requests

from bunsen_rebuilder.build.version_manager import parse_version
from bunsen_rebuilder.common.errors import NetworkError, ParseError

logger = logging.getLogger(__name__)


def parse_changelog_version(text: str, repository: str) -> str:
    """
    Return the version of the first "<repository> (<version>) ..." entry.

    Changelogs are newest-first, so only the first match matters.

    Raises:
        ParseError: if no entry for the repository is found
    """
    pattern = re.compile(rf'^{re.escape(repository)}\s+\(([^()\s]+)\)', re.MULTILINE)
    match = pattern.search(text)
    if not match:
        raise ParseError(f"No version entry for {repository} found in changelog")

    version = match.group(1)
    if parse_version(version) is None:
        raise ParseError(f"Malformed version {version!r} in changelog of {repository}")
    return version


class ChangelogClient:
    """Reads debian/changelog of a source repository from the hosting service"""

    def __init__(self, url_template: str, timeout: int = 30, session=None):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def changelog_url(self, repository: str) -> str:
        return self.url_template.format(repo=repository)

    def fetch_changelog(self, repository: str) -> str:
        """
        Download the changelog document

        Raises:
            NetworkError: host unreachable or document missing
        """
        url = self.changelog_url(repository)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise NetworkError(
                f"Changelog for {repository} not available (HTTP {status})",
                diagnostic=str(e),
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Cannot reach changelog for {repository}", diagnostic=str(e)) from e

        return response.text

    def fetch_latest_version(self, repository: str) -> str:
        """
        Newest version declared in the repository's changelog

        Raises:
            NetworkError: fetch failed
            ParseError: no version token found
        """
        text = self.fetch_changelog(repository)
        version = parse_changelog_version(text, repository)
        logger.debug(f"✅ Upstream version for {repository}: {version}")
        return version
