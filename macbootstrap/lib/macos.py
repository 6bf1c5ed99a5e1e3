from __future__ import annotations

import logging

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def pkgutil_expand(pkg_path: str, dest_dir: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(["pkgutil", "--expand", pkg_path, dest_dir], check=False, dry_run=dry_run)


def bsdtar_extract(archive: str, dest_dir: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(["bsdtar", "-xvf", archive, "-C", dest_dir], check=False, dry_run=dry_run)


def tar_extract(archive: str, dest_dir: str, *, strip_components: int = 0, dry_run: bool = False) -> CmdResult:
    argv = ["tar", "xzf", archive, "-C", dest_dir]
    if strip_components:
        argv += ["--strip-components", str(strip_components)]
    return run_cmd(argv, check=False, dry_run=dry_run)


def set_wallpaper(image_path: str, *, dry_run: bool = False) -> CmdResult:
    script = f'tell application "System Events" to set picture of every desktop to "{image_path}"'
    return run_cmd(["osascript", "-e", script], check=False, dry_run=dry_run)


def dock_add(dockutil: str, app_path: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd([dockutil, "--add", app_path], check=False, dry_run=dry_run)


def restart_dock(*, dry_run: bool = False) -> CmdResult:
    return run_cmd(["killall", "Dock"], check=False, dry_run=dry_run)
