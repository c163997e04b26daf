"""
Source Inspector Module - Validates Debian packaging metadata of an extracted source tree
"""

import logging
import tarfile
from dataclasses import dataclass
from pathlib import Path

from debian import deb822

from bunsen_rebuilder.build.changelog_client import parse_changelog_version
from bunsen_rebuilder.build.version_manager import upstream_version
from bunsen_rebuilder.common.errors import FormatError, ParseError

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise ParseError(f"{path} is not valid UTF-8", diagnostic=str(e)) from e


@dataclass(frozen=True)
class SourceInfo:
    name: str
    version: str
    upstream_version: str

    @property
    def helper_package(self) -> str:
        """Meta-package mk-build-deps creates for this source"""
        return f"{self.name}-build-deps"


class SourceInspector:
    """Checks the debian/ descriptor directory and reads name and version from it"""

    def __init__(self, source_format: str = "3.0 (quilt)"):
        self.source_format = source_format

    def inspect(self, source_dir: Path) -> SourceInfo:
        """
        Validate packaging metadata and extract the source name and version

        Raises:
            FormatError: descriptor directory or format declaration missing, or wrong format
            ParseError: control or changelog lacks the expected fields, or a file is not UTF-8
        """
        source_dir = Path(source_dir)
        debian_dir = source_dir / "debian"
        if not debian_dir.is_dir():
            raise FormatError(f"{source_dir.name}: no debian/ packaging directory")

        control = debian_dir / "control"
        changelog = debian_dir / "changelog"
        format_file = debian_dir / "source" / "format"

        if not control.is_file():
            raise FormatError(f"{source_dir.name}: debian/control is missing")
        if not changelog.is_file():
            raise FormatError(f"{source_dir.name}: debian/changelog is missing")
        if not format_file.is_file():
            raise FormatError(f"{source_dir.name}: debian/source/format is missing")

        declared = _read_text(format_file).strip()
        if declared != self.source_format:
            raise FormatError(
                f"{source_dir.name}: unsupported source format '{declared}' "
                f"(only '{self.source_format}' is built)"
            )

        name = self.read_source_name(control)
        version = parse_changelog_version(_read_text(changelog), name)

        info = SourceInfo(name=name, version=version, upstream_version=upstream_version(version))
        logger.info(f"SOURCE_INFO name={info.name} version={info.version} upstream={info.upstream_version}")
        return info

    @staticmethod
    def read_source_name(control: Path) -> str:
        """Source: field of the first debian/control paragraph"""
        try:
            with open(control, 'r', encoding='utf-8') as f:
                paragraph = next(iter(deb822.Deb822.iter_paragraphs(f)), None)
        except UnicodeDecodeError as e:
            raise ParseError(f"{control} is not valid UTF-8", diagnostic=str(e)) from e

        name = (paragraph or {}).get('Source', '').strip()
        if not name:
            raise ParseError(f"{control} has no Source: declaration")
        return name

    def prepare_orig(self, source_dir: Path, info: SourceInfo) -> Path:
        """
        Rename the tree to <name>-<upstream> and create <name>_<upstream>.orig.tar.xz beside it.

        The orig tarball holds the tree without debian/, as the quilt format expects.
        Returns the renamed source directory.
        """
        source_dir = Path(source_dir)
        target_dir = source_dir.parent / f"{info.name}-{info.upstream_version}"
        if target_dir != source_dir:
            if target_dir.exists():
                raise FormatError(f"Cannot rename source tree: {target_dir.name} already exists")
            source_dir = source_dir.rename(target_dir)

        orig = source_dir.parent / f"{info.name}_{info.upstream_version}.orig.tar.xz"

        def _exclude_debian(member):
            parts = Path(member.name).parts
            if len(parts) > 1 and parts[1] == "debian":
                return None
            return member

        with tarfile.open(orig, 'w:xz') as tar:
            tar.add(source_dir, arcname=source_dir.name, filter=_exclude_debian)

        logger.info(f"ORIG_TARBALL_CREATED file={orig.name}")
        return source_dir
