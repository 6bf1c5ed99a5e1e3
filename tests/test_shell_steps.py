"""
Tests for the init repo checkout and zsh configuration steps.
"""

import os
from pathlib import Path

import pytest

from macbootstrap.errors import RepositoryCloneFailed, ShellNotFound
from macbootstrap.lib.brew import shellenv_line
from macbootstrap.steps import step_20_clone_init_repo as clone
from macbootstrap.steps import step_50_configure_shell as shell
from macbootstrap.steps.step_20_clone_init_repo import CloneInitRepoStep
from macbootstrap.steps.step_50_configure_shell import ConfigureShellStep
from conftest import FakeRunner, make_ctx

REPO = "https://github.com/example/init.git"


def test_existing_checkout_is_replaced(tmp_path: Path, monkeypatch):
    stale = tmp_path / "init" / "old.txt"
    stale.parent.mkdir()
    stale.write_text("x")
    runner = FakeRunner()
    monkeypatch.setattr(clone, "run_cmd", runner)

    CloneInitRepoStep().run(make_ctx(tmp_path, settings={"initrepo": REPO}))

    assert not stale.exists()
    assert runner.calls == [["git", "clone", REPO, str(tmp_path / "init")]]


def test_clone_failure_is_fatal(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(clone, "run_cmd", FakeRunner(lambda argv: (128, "")))

    with pytest.raises(RepositoryCloneFailed):
        CloneInitRepoStep().run(make_ctx(tmp_path, settings={"initrepo": REPO}))


def test_clone_requires_a_url(tmp_path: Path):
    with pytest.raises(RepositoryCloneFailed):
        CloneInitRepoStep().run(make_ctx(tmp_path))


def test_missing_zsh_is_fatal(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(shell, "which", lambda name: None)

    with pytest.raises(ShellNotFound):
        ConfigureShellStep().run(make_ctx(tmp_path))
    assert not (tmp_path / ".config").exists()


def test_shell_configured(tmp_path: Path, monkeypatch):
    template = tmp_path / "init" / "zsh" / ".zshenv"
    template.parent.mkdir(parents=True)
    template.write_text('export ZDOTDIR="$HOME/.config/zsh"\n')
    sourced = []

    def fake_source(sh, files, **kw):
        sourced.append(list(files))
        return {"MACBOOTSTRAP_TEST_VAR": "sourced"}

    monkeypatch.setattr(shell, "which", lambda name: "/bin/zsh")
    monkeypatch.setattr(shell, "source_files", fake_source)
    monkeypatch.setenv("MACBOOTSTRAP_TEST_VAR", "before")

    report = ConfigureShellStep().run(make_ctx(tmp_path))

    for d in (".config", ".config/zsh", ".config/git"):
        assert (tmp_path / d).is_dir()
    brew_cmd = str(tmp_path / "homebrew" / "bin" / "brew")
    assert (tmp_path / ".zshenv").read_text().splitlines() == [
        'export ZDOTDIR="$HOME/.config/zsh"',
        shellenv_line(brew_cmd),
    ]
    assert sourced == [[str(tmp_path / ".zshenv"), str(tmp_path / ".config" / "zsh" / ".zshrc")]]
    assert os.environ["MACBOOTSTRAP_TEST_VAR"] == "sourced"
    assert report.failed == []


def test_missing_template_is_recoverable(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(shell, "which", lambda name: "/bin/zsh")
    monkeypatch.setattr(shell, "source_files", lambda sh, files, **kw: {})

    report = ConfigureShellStep().run(make_ctx(tmp_path))

    assert report.failed == [".zshenv"]
    assert report.skipped == ["environment"]
    assert (tmp_path / ".zshenv").read_text().count("shellenv") == 1
