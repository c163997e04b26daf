"""
Source Fetcher Module - Downloads and unpacks source archives
"""

import logging
import tarfile
from pathlib import Path

import requests

from bunsen_rebuilder.common.errors import FormatError, NetworkError

logger = logging.getLogger(__name__)


class SourceFetcher:
    """Downloads a repository tarball and extracts it into a workspace"""

    def __init__(self, url_template: str, timeout: int = 30, session=None):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def archive_url(self, repository: str) -> str:
        return self.url_template.format(repo=repository)

    def download(self, repository: str, dest_dir: Path) -> Path:
        """
        Stream the source archive of a repository into dest_dir

        Raises:
            NetworkError: host unreachable or archive missing
        """
        url = self.archive_url(repository)
        archive_path = Path(dest_dir) / f"{repository}.tar.gz"
        logger.info(f"📥 Downloading {repository} sources...")

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(archive_path, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=64 * 1024):
                        if chunk:
                            f.write(chunk)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise NetworkError(
                f"Source archive for {repository} not available (HTTP {status})",
                diagnostic=str(e),
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Cannot download sources of {repository}", diagnostic=str(e)) from e

        logger.debug(f"ARCHIVE_SAVED repo={repository} bytes={archive_path.stat().st_size}")
        return archive_path

    def extract(self, archive_path: Path, workspace: Path) -> Path:
        """
        Unpack the archive into workspace and return its top-level source directory

        Raises:
            FormatError: unreadable archive, unsafe member paths, or no top-level directory
        """
        workspace = Path(workspace)
        extract_dir = workspace / "src"
        extract_dir.mkdir(exist_ok=True)
        root = extract_dir.resolve()

        try:
            with tarfile.open(archive_path, 'r:*') as tar:
                members = tar.getmembers()
                for member in members:
                    target = (root / member.name).resolve()
                    if target != root and root not in target.parents:
                        raise FormatError(f"Archive member escapes workspace: {member.name}")
                    if member.issym() or member.islnk():
                        base = target.parent if member.issym() else root
                        link_target = (base / member.linkname).resolve()
                        if root not in link_target.parents and link_target != root:
                            raise FormatError(f"Archive link escapes workspace: {member.name}")
                if hasattr(tarfile, 'data_filter'):
                    tar.extractall(extract_dir, members=members, filter='data')
                else:
                    tar.extractall(extract_dir, members=members)
        except (tarfile.TarError, OSError) as e:
            raise FormatError(f"Cannot extract {Path(archive_path).name}", diagnostic=str(e)) from e

        return self.find_source_dir(extract_dir)

    @staticmethod
    def find_source_dir(extract_dir: Path) -> Path:
        """First non-hidden directory directly below extract_dir"""
        for entry in sorted(Path(extract_dir).iterdir()):
            if entry.is_dir() and not entry.name.startswith('.'):
                return entry
        raise FormatError("No top-level source directory in extracted archive")
