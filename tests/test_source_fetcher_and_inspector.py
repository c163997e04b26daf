import io
import tarfile

import pytest
import requests

from bunsen_rebuilder.build.artifact_manager import ArtifactManager, artifact_base_name, artifact_version
from bunsen_rebuilder.build.source_fetcher import SourceFetcher
from bunsen_rebuilder.build.source_inspector import SourceInspector
from bunsen_rebuilder.common.errors import FormatError, NetworkError, ParseError

from conftest import FakeResponse, FakeSession, make_tarball, write_source_tree

TEMPLATE = "https://example.org/{repo}/master.tar.gz"


def fetch_and_extract(tmp_path, data, repository="bunsen-foo"):
    session = FakeSession({TEMPLATE.format(repo=repository): FakeResponse(content=data)})
    fetcher = SourceFetcher(TEMPLATE, session=session)
    workspace = tmp_path / "ws"
    workspace.mkdir()
    archive = fetcher.download(repository, workspace)
    return fetcher.extract(archive, workspace)


def test_download_and_extract_finds_top_level_directory(tmp_path):
    data = make_tarball(tmp_path, "bunsen-foo-master", name="bunsen-foo", version="2.1-1")
    source_dir = fetch_and_extract(tmp_path, data)
    assert source_dir.name == "bunsen-foo-master"
    assert (source_dir / "debian" / "control").is_file()


def test_missing_archive_is_network_error(tmp_path):
    fetcher = SourceFetcher(TEMPLATE, session=FakeSession())
    with pytest.raises(NetworkError) as excinfo:
        fetcher.download("bunsen-gone", tmp_path)
    assert "404" in str(excinfo.value)


def test_connection_failure_is_network_error(tmp_path):
    url = TEMPLATE.format(repo="bunsen-foo")
    session = FakeSession({url: requests.exceptions.ConnectionError("refused")})
    with pytest.raises(NetworkError):
        SourceFetcher(TEMPLATE, session=session).download("bunsen-foo", tmp_path)


def test_corrupt_archive_is_format_error(tmp_path):
    with pytest.raises(FormatError):
        fetch_and_extract(tmp_path, b"definitely not gzip")


def test_member_escaping_workspace_is_rejected(tmp_path):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode='w:gz') as tar:
        payload = b"owned\n"
        member = tarfile.TarInfo("../escape.txt")
        member.size = len(payload)
        tar.addfile(member, io.BytesIO(payload))
    with pytest.raises(FormatError):
        fetch_and_extract(tmp_path, buffer.getvalue())
    assert not (tmp_path / "ws" / "escape.txt").exists()


def test_inspect_reads_name_and_version(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo-master", "bunsen-foo", version="1:2.3.4-2")
    info = SourceInspector().inspect(tree)
    assert info.name == "bunsen-foo"
    assert info.version == "1:2.3.4-2"
    assert info.upstream_version == "2.3.4"
    assert info.helper_package == "bunsen-foo-build-deps"


def test_missing_debian_directory_is_format_error(tmp_path):
    tree = write_source_tree(tmp_path / "plain", "plain", with_debian=False)
    with pytest.raises(FormatError):
        SourceInspector().inspect(tree)


def test_missing_format_file_is_format_error(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo", "bunsen-foo", source_format=None)
    with pytest.raises(FormatError):
        SourceInspector().inspect(tree)


def test_native_format_is_rejected(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo", "bunsen-foo", source_format="3.0 (native)")
    with pytest.raises(FormatError) as excinfo:
        SourceInspector().inspect(tree)
    assert "3.0 (native)" in str(excinfo.value)


def test_missing_source_field_is_parse_error(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo", "bunsen-foo")
    (tree / "debian" / "control").write_text("Package: bunsen-foo\nArchitecture: all\n")
    with pytest.raises(ParseError):
        SourceInspector().inspect(tree)


def test_changelog_not_in_utf8_is_parse_error(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo", "bunsen-foo",
                             maintainer="Ren\u00e9 Dupr\u00e9", changelog_encoding="latin-1")
    with pytest.raises(ParseError) as excinfo:
        SourceInspector().inspect(tree)
    assert "UTF-8" in str(excinfo.value)


def test_control_not_in_utf8_is_parse_error(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo", "bunsen-foo")
    (tree / "debian" / "control").write_bytes(b"Source: bunsen-foo\nMaintainer: Ren\xe9\n")
    with pytest.raises(ParseError):
        SourceInspector().inspect(tree)


def test_prepare_orig_excludes_packaging_directory(tmp_path):
    tree = write_source_tree(tmp_path / "bunsen-foo-master", "bunsen-foo", version="2.0-3")
    inspector = SourceInspector()
    info = inspector.inspect(tree)

    source_dir = inspector.prepare_orig(tree, info)

    assert source_dir.name == "bunsen-foo-2.0"
    orig = tmp_path / "bunsen-foo_2.0.orig.tar.xz"
    with tarfile.open(orig) as tar:
        names = tar.getnames()
    assert "bunsen-foo-2.0/README" in names
    assert not any("/debian" in name for name in names)


def test_artifact_names_from_file_names():
    assert artifact_base_name("bunsen-images_11.2-1_all.deb") == "bunsen-images"
    assert artifact_version("bunsen-images_11.2-1_all.deb") == "11.2-1"
    assert artifact_version("odd.deb") == ""


def test_move_built_packages(tmp_path):
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    (build_dir / "bunsen-foo_1.0-1_all.deb").write_bytes(b"deb")
    (build_dir / "bunsen-foo_1.0-1_amd64.changes").write_text("changes")

    artifacts = ArtifactManager(tmp_path / "out").move_built_packages(build_dir, "bunsen-foo")

    assert [a.base_name for a in artifacts] == ["bunsen-foo"]
    assert artifacts[0].file_path == tmp_path / "out" / "bunsen-foo_1.0-1_all.deb"
    assert artifacts[0].file_path.is_file()
    assert not (build_dir / "bunsen-foo_1.0-1_all.deb").exists()
