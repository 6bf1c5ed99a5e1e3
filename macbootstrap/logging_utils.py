from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = os.path.expanduser(PATHS.log_default)
DEFAULT_RECORDING_LOG_PATH = os.path.expanduser(PATHS.recording_log_default)

LOG_FORMAT = "%(asctime)s [%(module)s]@[%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RED = "\033[31m"
_RESET = "\033[0m"

_CONFIGURED_ATTR = "_macbootstrap_configured"
_LOG_PATH_ATTR = "_macbootstrap_log_path"
_HANDLERS_ATTR = "_macbootstrap_handlers"


class StatusFormatter(logging.Formatter):
    """Appends ``(exit code: N)`` for records logged with a non-zero ``status``.

    With ``color=True`` ERROR records are painted red (console only).
    """

    def __init__(self, *, color: bool = False):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self.color = color

    def formatMessage(self, record: logging.LogRecord) -> str:
        status = getattr(record, "status", 0) or 0
        if status:
            record.message = f"{record.message} (exit code: {status})"
        line = super().formatMessage(record)
        if self.color and record.levelno >= logging.ERROR:
            line = f"{_RED}{line}{_RESET}"
        return line


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    transcript_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging for a provisioning session.

    - Session log: every INFO+ line, appended.
    - Recording transcript: everything down to DEBUG (command output included).
    - Console: same lines as the session log, errors in red on a TTY.

    If the requested log path is not writable we fall back to a file in the
    current working directory. Returns the file path actually used.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, _CONFIGURED_ATTR, False):
        return getattr(root, _LOG_PATH_ATTR, log_path)

    handlers: list[logging.Handler] = []

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path)
        chosen_path = log_path
    except OSError:
        chosen_path = str(Path.cwd() / "macbootstrap.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setLevel(level)
    file_handler.setFormatter(StatusFormatter())
    handlers.append(file_handler)

    if transcript_path:
        try:
            Path(os.path.dirname(transcript_path) or ".").mkdir(parents=True, exist_ok=True)
            transcript = logging.FileHandler(transcript_path)
        except OSError:
            logging.getLogger(__name__).warning("Recording transcript %s is not writable", transcript_path)
        else:
            transcript.setLevel(logging.DEBUG)
            transcript.setFormatter(StatusFormatter())
            handlers.append(transcript)

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(level)
        isatty = getattr(console.stream, "isatty", None)
        console.setFormatter(StatusFormatter(color=bool(isatty and isatty())))
        handlers.append(console)

    for h in handlers:
        root.addHandler(h)

    setattr(root, _CONFIGURED_ATTR, True)
    setattr(root, _LOG_PATH_ATTR, chosen_path)
    setattr(root, _HANDLERS_ATTR, handlers)

    logging.getLogger(__name__).info("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path


def shutdown_logging() -> None:
    """Detach and close the handlers installed by configure_logging()."""

    root = logging.getLogger()
    for h in getattr(root, _HANDLERS_ATTR, []):
        root.removeHandler(h)
        h.close()
    setattr(root, _HANDLERS_ATTR, [])
    setattr(root, _CONFIGURED_ATTR, False)


def reset_logs(log_path: str, transcript_path: Optional[str] = None) -> List[str]:
    """Delete the session log and recording transcript left by a previous run."""

    removed: List[str] = []
    for p in (log_path, transcript_path):
        if p and os.path.isfile(p):
            os.remove(p)
            removed.append(p)
    return removed
