import pytest

from bunsen_rebuilder.build.dependency_installer import DependencyInstaller
from bunsen_rebuilder.build.local_builder import BUILD_CMD, LocalBuilder
from bunsen_rebuilder.common.errors import StateError, ToolError
from bunsen_rebuilder.repo.apt_client import AptClient
from bunsen_rebuilder.repo.package_query import PackageQuery

from conftest import FakeShell, write_source_tree

HELPER = "bunsen-foo-build-deps"


def is_status_query(cmd):
    return cmd[0] == 'dpkg-query' and cmd[-1] == HELPER


def is_purge(cmd):
    return 'purge' in cmd


def make_installer(rules):
    shell = FakeShell(rules)
    installer = DependencyInstaller(shell, AptClient(shell, package_query=None), PackageQuery(shell))
    return installer, shell


def test_stale_helper_is_purged_before_mk_build_deps(tmp_path):
    installer, shell = make_installer([(is_status_query, 0, "ii ", "")])
    source_dir = write_source_tree(tmp_path / "bunsen-foo-1.0", "bunsen-foo")

    installer.install_build_dependencies(source_dir, HELPER)

    programs = [next(part for part in cmd if part != 'sudo') for cmd in shell.commands]
    assert programs == ['dpkg-query', 'apt-get', 'mk-build-deps']
    assert shell.commands[1][0] == 'sudo'
    assert shell.commands[1][-2:] == ['purge', HELPER]
    assert shell.commands[2][-1] == 'debian/control'


def test_absent_helper_goes_straight_to_mk_build_deps(tmp_path):
    installer, shell = make_installer([(is_status_query, 1, "", "no packages found matching")])

    installer.install_build_dependencies(tmp_path, HELPER)

    assert not any(is_purge(cmd) for cmd in shell.commands)
    assert shell.commands[-1][0] == 'mk-build-deps'


def test_failed_purge_is_state_error_and_stops_install(tmp_path):
    installer, shell = make_installer([
        (is_status_query, 0, "ii", ""),
        (is_purge, 100, "", "E: Sub-process /usr/bin/dpkg returned an error code (1)"),
    ])

    with pytest.raises(StateError) as excinfo:
        installer.install_build_dependencies(tmp_path, HELPER)

    assert HELPER in str(excinfo.value)
    assert "dpkg returned an error code" in excinfo.value.diagnostic
    assert not any(cmd[0] == 'mk-build-deps' for cmd in shell.commands)


def test_mk_build_deps_failure_is_tool_error(tmp_path):
    installer, _ = make_installer([
        (lambda cmd: cmd[0] == 'mk-build-deps', 1, "", "Unmet build dependencies: libfoo-dev"),
    ])

    with pytest.raises(ToolError) as excinfo:
        installer.install_build_dependencies(tmp_path, HELPER)
    assert "libfoo-dev" in excinfo.value.diagnostic


def test_failed_build_carries_exit_code_and_output_tail(tmp_path):
    stdout = "\n".join(f"compiling step {i}" for i in range(100))
    shell = FakeShell([(lambda cmd: cmd == BUILD_CMD, 2, stdout, "")])

    with pytest.raises(ToolError) as excinfo:
        LocalBuilder(shell).build(tmp_path / "bunsen-foo-1.0")

    error = excinfo.value
    assert error.returncode == 2
    assert error.command == BUILD_CMD
    assert "exit code 2" in str(error)
    assert error.diagnostic.splitlines()[-1] == "compiling step 99"
    assert "compiling step 59" not in error.diagnostic.splitlines()


def test_failed_build_prefers_stderr_in_diagnostic(tmp_path):
    shell = FakeShell([(lambda cmd: cmd == BUILD_CMD, 2, "noise\n",
                        "dpkg-source: error: aborting due to unexpected upstream changes\n")])

    with pytest.raises(ToolError) as excinfo:
        LocalBuilder(shell).build(tmp_path / "bunsen-foo-1.0")
    assert excinfo.value.diagnostic == "dpkg-source: error: aborting due to unexpected upstream changes"


def test_successful_build_runs_in_source_tree(tmp_path):
    shell = FakeShell()
    LocalBuilder(shell).build(tmp_path / "bunsen-foo-1.0")
    assert shell.commands == [BUILD_CMD]
