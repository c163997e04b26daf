import io
import subprocess
import tarfile
from pathlib import Path

import pytest
import requests

from bunsen_rebuilder.common.errors import ToolError


class FakeResponse:
    def __init__(self, text="", status_code=200, content=b""):
        self.text = text
        self.status_code = status_code
        self.content = content or text.encode()

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1024):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Maps URLs to FakeResponse objects or exceptions"""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requested = []

    def get(self, url, timeout=None, stream=False):
        self.requested.append(url)
        target = self.routes.get(url)
        if target is None:
            return FakeResponse(status_code=404)
        if isinstance(target, Exception):
            raise target
        return target


class FakeShell:
    """Records commands; answers from a list of (predicate, returncode, stdout, stderr)"""

    def __init__(self, rules=None):
        self.rules = rules or []
        self.commands = []

    def _answer(self, cmd):
        for predicate, returncode, stdout, stderr in self.rules:
            if predicate(cmd):
                return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def run_command(self, cmd, check=False, sudo=False, **kwargs):
        cmd = list(cmd)
        if sudo:
            cmd = ['sudo'] + cmd
        self.commands.append(cmd)
        result = self._answer(cmd)
        if check and result.returncode != 0:
            raise ToolError("fake failure", diagnostic=result.stderr, command=cmd,
                            returncode=result.returncode)
        return result

    def run_command_with_retry(self, cmd, **kwargs):
        kwargs.pop('max_retries', None)
        return self.run_command(cmd, **kwargs)


def write_source_tree(root: Path, name: str, version: str = "1.0-1",
                      source_format="3.0 (quilt)", with_debian=True,
                      maintainer="Maintainer", changelog_encoding="utf-8"):
    """Minimal Debian source tree below root"""
    root.mkdir(parents=True, exist_ok=True)
    (root / "README").write_text("hello\n")
    if not with_debian:
        return root
    debian = root / "debian"
    (debian / "source").mkdir(parents=True)
    (debian / "control").write_text(
        f"Source: {name}\nSection: x11\nPriority: optional\n\n"
        f"Package: {name}\nArchitecture: all\nDescription: test package\n"
    )
    (debian / "changelog").write_bytes((
        f"{name} ({version}) unstable; urgency=medium\n\n  * New release.\n\n"
        f" -- {maintainer} <m@example.org>  Mon, 01 Jan 2024 00:00:00 +0000\n\n"
        f"{name} (0.1-1) unstable; urgency=medium\n\n  * Initial.\n\n"
        f" -- Maintainer <m@example.org>  Mon, 01 Jan 2023 00:00:00 +0000\n"
    ).encode(changelog_encoding))
    if source_format is not None:
        (debian / "source" / "format").write_text(source_format + "\n")
    return root


def make_tarball(tmp_path: Path, top_dir: str, **tree_kwargs) -> bytes:
    """GitHub-style archive: one top-level <repo>-master directory"""
    staging = tmp_path / "staging" / top_dir
    write_source_tree(staging, **tree_kwargs)
    archive = tmp_path / f"{top_dir}.tar.gz"
    with tarfile.open(archive, 'w:gz') as tar:
        tar.add(staging, arcname=top_dir)
    return archive.read_bytes()


def _tar_gz(files: dict) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for member_name, payload in files.items():
            info = tarfile.TarInfo(member_name)
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))
    return buffer.getvalue()


def make_deb(path: Path, name: str, version: str, arch: str = "all") -> Path:
    """Minimal binary package: ar archive of debian-binary, control.tar.gz, data.tar.gz"""
    control = (
        f"Package: {name}\nVersion: {version}\nArchitecture: {arch}\n"
        f"Maintainer: Maintainer <m@example.org>\nDescription: test package\n"
    ).encode()
    members = [
        ("debian-binary", b"2.0\n"),
        ("control.tar.gz", _tar_gz({"./control": control})),
        ("data.tar.gz", _tar_gz({"./usr/share/doc/README": b"hello\n"})),
    ]
    content = bytearray(b"!<arch>\n")
    for member_name, payload in members:
        content += f"{member_name:<16}{0:<12}{0:<6}{0:<6}{100644:<8}{len(payload):<10}`\n".encode()
        content += payload
        if len(payload) % 2:
            content += b"\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(bytes(content))
    return path


def archive_routes(tmp_path: Path, url_template: str, trees: dict) -> dict:
    """FakeSession routes serving one tarball per repository; trees maps repository to tree kwargs"""
    routes = {}
    for repository, kwargs in trees.items():
        data = make_tarball(tmp_path / repository, f"{repository}-master", name=repository, **kwargs)
        routes[url_template.format(repo=repository)] = FakeResponse(content=data)
    return routes


class FakeInstaller:
    def __init__(self):
        self.installed = []
        self.removed = []

    def install_build_dependencies(self, source_dir, helper_package):
        self.installed.append(helper_package)

    def remove_helper(self, helper_package, reason="stale"):
        self.removed.append((helper_package, reason))


class FakeBuilder:
    """Drops one .deb per build beside the source tree, or fails for chosen trees"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.built_dirs = []

    def build(self, source_dir):
        self.built_dirs.append(source_dir)
        name, _, upstream = source_dir.name.rpartition("-")
        if name in self.failing:
            raise ToolError(f"dpkg-buildpackage failed for {source_dir.name}", returncode=2)
        make_deb(source_dir.parent / f"{name}_{upstream}-1_all.deb", name, f"{upstream}-1")


@pytest.fixture
def fake_shell():
    return FakeShell()
