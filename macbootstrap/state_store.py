from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def read_marker(path: str) -> Optional[str]:
    p = Path(path)
    if not p.is_file():
        return None
    return p.read_text(encoding="utf-8").strip()


def touch_marker(path: str, *, today: Optional[date] = None, dry_run: bool = False) -> bool:
    """Record today's date as the last successful completion of a step.

    Markers are an audit trail only; nothing reads them to skip work.
    Returns True when the marker was (re)written.
    """

    current = (today or date.today()).strftime(DATE_FORMAT)
    last = read_marker(path)

    if last == current:
        logger.info("The %s timestamp is %s", path, last)
        return False

    logger.info("Creating %s ...", path)
    if dry_run:
        return True

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(current + "\n", encoding="utf-8")
    return True
