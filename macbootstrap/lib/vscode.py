from __future__ import annotations

import logging
import os
from typing import Iterable, Optional, Set

from .command import CmdResult, run_cmd, which

logger = logging.getLogger(__name__)

APP_NAME = "Visual Studio Code.app"
APP_BIN_REL = "Contents/Resources/app/bin"


def find_app(app_dirs: Iterable[str]) -> Optional[str]:
    for d in app_dirs:
        p = os.path.join(d, APP_NAME)
        if os.path.isdir(p):
            return p
    return None


def path_line(app_path: str) -> str:
    return f'export PATH="$PATH:{app_path}/{APP_BIN_REL}"'


def resolve_code_cmd(code_cmd: str, app_path: Optional[str]) -> Optional[str]:
    """Locate the ``code`` CLI on PATH, falling back to the app bundle."""

    found = which(code_cmd)
    if found:
        return found
    if app_path:
        candidate = os.path.join(app_path, APP_BIN_REL, "code")
        if os.path.isfile(candidate):
            return candidate
    return None


def list_extensions(code: str) -> Set[str]:
    r = run_cmd([code, "--list-extensions"], check=False)
    if not r.ok:
        logger.error("Could not list installed extensions", extra={"status": r.returncode})
        return set()
    return {line.strip() for line in r.stdout.splitlines() if line.strip()}


def install_extension(code: str, identifier: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd([code, "--install-extension", identifier], check=False, dry_run=dry_run)
