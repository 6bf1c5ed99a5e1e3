from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def _make_writable(path: Path) -> None:
    # A previous run may have applied a read-only mode to the copy.
    if path.is_dir():
        wanted = stat.S_IWUSR | stat.S_IXUSR
    elif path.is_file():
        wanted = stat.S_IWUSR
    else:
        return
    if not os.access(path, os.W_OK):
        path.chmod(path.stat().st_mode | wanted)


def copy_tree(src: str, dst: str, *, dry_run: bool = False) -> None:
    """Merge-copy the contents of ``src`` into ``dst`` (rerun-safe)."""

    s = Path(src)
    d = Path(dst)
    if not s.exists():
        raise FileNotFoundError(src)

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(s), str(d))
        return

    d.mkdir(parents=True, exist_ok=True)
    _make_writable(d)
    for item in s.rglob("*"):
        rel = item.relative_to(s)
        out = d / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
            _make_writable(out)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            _make_writable(out)
            shutil.copy2(item, out)


def copy_file(src: str, dst: str, *, dry_run: bool = False) -> None:
    if not Path(src).is_file():
        raise FileNotFoundError(src)
    if dry_run:
        logger.info("Would copy %s -> %s", src, dst)
        return
    Path(dst).parent.mkdir(parents=True, exist_ok=True)
    _make_writable(Path(dst))
    shutil.copy2(src, dst)


def chmod(path: str, mode: str, *, recursive: bool = False, dry_run: bool = False) -> CmdResult:
    # mode goes to chmod verbatim so symbolic forms ("go-w", "u+x") work too.
    argv = ["chmod"]
    if recursive:
        argv.append("-R")
    argv += [mode, path]
    return run_cmd(argv, check=False, dry_run=dry_run)


def ensure_dir(path: str, *, dry_run: bool = False) -> bool:
    """Create ``path`` (and parents). Returns True if it had to be created."""

    p = Path(path)
    if p.is_dir():
        return False
    logger.info("Creating directory %s...", path)
    if not dry_run:
        p.mkdir(parents=True, exist_ok=True)
    return True


def remove_path(path: str, *, dry_run: bool = False) -> bool:
    p = Path(path)
    if not (p.exists() or p.is_symlink()):
        return False
    logger.info("Deleting %s ...", path)
    if dry_run:
        return True
    if p.is_dir() and not p.is_symlink():
        shutil.rmtree(p)
    else:
        p.unlink()
    return True
