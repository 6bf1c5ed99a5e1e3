from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def ensure_line_present(path: str, line: str, *, dry_run: bool = False) -> bool:
    """Append ``line`` to ``path`` unless an identical line is already there.

    Returns True if the file was changed.
    """

    p = Path(path)
    existing = p.read_text(encoding="utf-8", errors="surrogateescape") if p.is_file() else ""
    if line in existing.splitlines():
        logger.info("'%s' is already in %s", line, path)
        return False

    logger.info("Adding '%s' to %s", line, path)
    if dry_run:
        return True

    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8", errors="surrogateescape") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    return True


def parse_env0(blob: str) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for item in blob.split("\0"):
        if "=" not in item:
            continue
        key, _, value = item.partition("=")
        env[key] = value
    return env


def source_files(shell: str, files: Sequence[str], *, dry_run: bool = False) -> Dict[str, str]:
    """Source ``files`` in ``shell`` and return the resulting environment.

    Missing files are skipped. An empty dict means nothing could be sourced.
    """

    present = [f for f in files if os.path.isfile(f)]
    if not present:
        return {}

    script = " && ".join(f'. "{f}"' for f in present) + " && env -0"
    r = run_cmd([shell, "-c", script], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Sourcing %s failed", ", ".join(present), extra={"status": r.returncode})
        return {}
    return parse_env0(r.stdout)
