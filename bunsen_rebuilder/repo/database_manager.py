"""
Database manager for local repository index operations
"""

import gzip
import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import List

from debian import arfile, deb822, debfile

from bunsen_rebuilder.common.errors import StateError

logger = logging.getLogger(__name__)

INDEX_NAME = "Packages.gz"

# fields dpkg-scanpackages places after the control fields
CHECKSUMS = (('MD5sum', hashlib.md5), ('SHA1', hashlib.sha1), ('SHA256', hashlib.sha256))


class DatabaseManager:
    """Regenerates Packages.gz from the full content of the repository directory"""

    def __init__(self, repo_dir):
        self.repo_dir = Path(repo_dir)

    def list_packages(self) -> List[Path]:
        return sorted(p for p in self.repo_dir.glob("*.deb") if p.is_file())

    def read_control(self, deb_path: Path) -> deb822.Deb822:
        """Control stanza of a .deb"""
        try:
            return debfile.DebFile(str(deb_path)).debcontrol()
        except (debfile.DebError, arfile.ArError, OSError) as e:
            raise StateError(f"Cannot read control data of {deb_path.name}", diagnostic=str(e)) from e

    def build_stanza(self, deb_path: Path) -> deb822.Deb822:
        stanza = self.read_control(deb_path)
        stanza['Filename'] = f"./{deb_path.name}"
        stanza['Size'] = str(deb_path.stat().st_size)

        digests = [(field, factory()) for field, factory in CHECKSUMS]
        with open(deb_path, 'rb') as f:
            for chunk in iter(lambda: f.read(64 * 1024), b''):
                for _, digest in digests:
                    digest.update(chunk)
        for field, digest in digests:
            stanza[field] = digest.hexdigest()
        return stanza

    def generate_index(self) -> Path:
        """
        Scan the whole repository directory and rewrite Packages.gz

        Files whose control data cannot be read are left out of the index.
        The index is written to a temporary file and moved into place, so a
        reader never sees a partial index.

        Returns:
            Path to the index
        """
        packages = self.list_packages()
        logger.info(f"Generating {INDEX_NAME} for {len(packages)} packages")

        stanzas = []
        for package in packages:
            try:
                stanzas.append(self.build_stanza(package))
            except StateError as e:
                logger.warning(f"⚠️ INDEX_SKIP file={package.name} reason={e.diagnostic or e}")
        content = "\n".join(stanza.dump() for stanza in stanzas)

        index_path = self.repo_dir / INDEX_NAME
        fd, tmp_name = tempfile.mkstemp(prefix=".Packages.", dir=self.repo_dir)
        try:
            with os.fdopen(fd, 'wb') as raw, gzip.GzipFile(fileobj=raw, mode='wb', mtime=0) as gz:
                gz.write(content.encode('utf-8'))
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, index_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"✅ Index written: {index_path.name} ({len(stanzas)} entries)")
        return index_path
