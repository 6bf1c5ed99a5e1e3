"""
Tests for the per-package Homebrew loop.
"""

from pathlib import Path

from macbootstrap.config import PackageKind, PackageSpec
from macbootstrap.lib import brew
from macbootstrap.steps.step_40_install_packages import InstallPackagesStep, select_packages
from conftest import FakeRunner, make_ctx


def _brew_knows(casks=(), formulae=(), failing=()):
    def handler(argv):
        name = argv[-1]
        if argv[1] == "info":
            known = casks if "--cask" in argv else formulae
            return (0, "") if name in known else (1, "")
        if argv[1] == "install":
            return (1, "") if name in failing else (0, "")
        return (0, "")

    return handler


def _install_calls(runner):
    return [c for c in runner.calls if c[1] == "install"]


def test_native_package_is_never_installed(tmp_path: Path, monkeypatch):
    runner = FakeRunner(_brew_knows(formulae={"jq", "nextcloud"}, casks={"nextcloud"}))
    monkeypatch.setattr(brew, "run_cmd", runner)
    ctx = make_ctx(
        tmp_path,
        packages=(
            PackageSpec(name="jq", kind=PackageKind.MANAGED),
            PackageSpec(name="nextcloud", kind=PackageKind.NATIVE),
        ),
    )

    report = InstallPackagesStep().run(ctx)

    installs = _install_calls(runner)
    assert len(installs) == 1
    assert installs[0][-1] == "jq"
    assert not runner.calls_with("nextcloud")
    assert report.ok == ["jq"]
    assert report.skipped == ["nextcloud"]


def test_cask_is_preferred_over_formula(tmp_path: Path, monkeypatch):
    runner = FakeRunner(_brew_knows(casks={"iterm2"}, formulae={"iterm2", "jq"}))
    monkeypatch.setattr(brew, "run_cmd", runner)
    ctx = make_ctx(tmp_path, packages=(PackageSpec(name="iterm2"), PackageSpec(name="jq")))

    InstallPackagesStep().run(ctx)

    installs = _install_calls(runner)
    assert installs[0][2:] == ["--cask", "iterm2"]
    assert installs[1][2:] == ["jq"]
    assert runner.calls_with("info", "--cask", "jq")
    assert ["info", "iterm2"] not in [c[1:] for c in runner.calls]


def test_failures_do_not_stop_the_batch(tmp_path: Path, monkeypatch):
    runner = FakeRunner(_brew_knows(formulae={"jq", "yq", "broken"}, failing={"broken"}))
    monkeypatch.setattr(brew, "run_cmd", runner)
    ctx = make_ctx(
        tmp_path,
        packages=(PackageSpec(name="ghost"), PackageSpec(name="broken"), PackageSpec(name="jq"), PackageSpec(name="yq")),
    )

    report = InstallPackagesStep().run(ctx)

    assert report.failed == ["ghost", "broken"]
    assert report.ok == ["jq", "yq"]


def test_each_package_is_classified_once(tmp_path: Path, monkeypatch):
    runner = FakeRunner(_brew_knows(formulae={"jq"}))
    monkeypatch.setattr(brew, "run_cmd", runner)
    ctx = make_ctx(tmp_path, packages=(PackageSpec(name="jq"), PackageSpec(name="jq")))

    InstallPackagesStep().run(ctx)

    assert len(runner.calls_with("info", "--cask", "jq")) == 1
    assert len(_install_calls(runner)) == 1


def test_casks_go_to_the_user_applications_dir(tmp_path: Path, monkeypatch):
    seen_env = []

    def fake_run_cmd(argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False):
        seen_env.append(env)
        return FakeRunner(_brew_knows(casks={"iterm2"}))(argv)

    monkeypatch.setattr(brew, "run_cmd", fake_run_cmd)
    ctx = make_ctx(tmp_path, packages=(PackageSpec(name="iterm2"),))

    InstallPackagesStep().run(ctx)

    assert seen_env and all(e == {"HOMEBREW_CASK_OPTS": f"--appdir={tmp_path / 'Applications'}"} for e in seen_env)


def test_select_packages_keeps_order():
    pkgs = [PackageSpec("b"), PackageSpec("n", kind=PackageKind.NATIVE), PackageSpec("a"), PackageSpec("b")]
    assert [p.name for p in select_packages(pkgs)] == ["b", "a"]
