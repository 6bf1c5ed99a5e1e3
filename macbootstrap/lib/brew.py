from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

PackageRecord = Literal["cask", "formula"]


def cask_env(applications_dir: str) -> Dict[str, str]:
    # Casks land in ~/Applications so no admin rights are needed.
    return {"HOMEBREW_CASK_OPTS": f"--appdir={applications_dir}"}


def brew_has_cask(brew: str, name: str, *, env: Optional[Dict[str, str]] = None, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    return run_cmd([brew, "info", "--cask", name], check=False, env=env).ok


def brew_has_formula(brew: str, name: str, *, env: Optional[Dict[str, str]] = None, dry_run: bool = False) -> bool:
    if dry_run:
        # Be permissive in dry-run so planning doesn't fail.
        return True
    return run_cmd([brew, "info", name], check=False, env=env).ok


def classify_package(
    brew: str, name: str, *, env: Optional[Dict[str, str]] = None, dry_run: bool = False
) -> Optional[PackageRecord]:
    """Return which record kind brew knows ``name`` as, casks first."""

    if brew_has_cask(brew, name, env=env, dry_run=dry_run):
        return "cask"
    if brew_has_formula(brew, name, env=env, dry_run=dry_run):
        return "formula"
    return None


def brew_install(
    brew: str,
    name: str,
    *,
    cask: bool = False,
    env: Optional[Dict[str, str]] = None,
    dry_run: bool = False,
) -> CmdResult:
    argv = [brew, "install"]
    if cask:
        argv.append("--cask")
    argv.append(name)
    return run_cmd(argv, check=False, env=env, dry_run=dry_run)


def brew_update(brew: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd([brew, "update", "--force", "--quiet"], check=False, dry_run=dry_run)


def brew_prefix(brew: str, *, dry_run: bool = False) -> Optional[str]:
    r = run_cmd([brew, "--prefix"], check=False, dry_run=dry_run)
    prefix = r.stdout.strip()
    if not r.ok or not prefix:
        return None
    return prefix


def shellenv_line(brew: str) -> str:
    return f'eval "$({brew} shellenv)"'


def cask_opts_line() -> str:
    return 'export HOMEBREW_CASK_OPTS="--appdir=$HOME/Applications"'
