"""
Tests for the session log, recording transcript and log reset.
"""

import logging
import re
from pathlib import Path

from macbootstrap.logging_utils import StatusFormatter, configure_logging, reset_logs, shutdown_logging

LINE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \[test_logging_utils\]@\[(?P<func>\w+):\d+\] (?P<msg>.*)$"
)

log = logging.getLogger("tests.logging")


def _lines(path: Path) -> list:
    return path.read_text(encoding="utf-8").splitlines()


def test_line_format_names_caller(tmp_path: Path):
    session = tmp_path / "init.log"
    configure_logging(log_path=str(session), also_console=False)
    log.info("hello there")
    shutdown_logging()

    matches = [LINE_RE.match(line) for line in _lines(session)]
    ours = [m for m in matches if m and m.group("msg") == "hello there"]
    assert ours and ours[0].group("func") == "test_line_format_names_caller"


def test_status_is_appended(tmp_path: Path):
    session = tmp_path / "init.log"
    configure_logging(log_path=str(session), also_console=False)
    log.error("Failed to install jq.", extra={"status": 2})
    log.info("plain")
    shutdown_logging()

    text = session.read_text(encoding="utf-8")
    assert "Failed to install jq. (exit code: 2)" in text
    assert "plain (exit code" not in text


def test_transcript_records_debug(tmp_path: Path):
    session = tmp_path / "init.log"
    transcript = tmp_path / "terminal_session.log"
    configure_logging(log_path=str(session), transcript_path=str(transcript), also_console=False)
    log.debug("STDOUT noisy")
    log.info("visible")
    shutdown_logging()

    assert "STDOUT noisy" not in session.read_text(encoding="utf-8")
    transcript_text = transcript.read_text(encoding="utf-8")
    assert "STDOUT noisy" in transcript_text
    assert "visible" in transcript_text


def test_configure_twice_keeps_first(tmp_path: Path):
    first = configure_logging(log_path=str(tmp_path / "a.log"), also_console=False)
    handlers = list(logging.getLogger().handlers)
    second = configure_logging(log_path=str(tmp_path / "b.log"), also_console=False)
    assert first == second == str(tmp_path / "a.log")
    assert logging.getLogger().handlers == handlers


def test_color_only_for_errors():
    fmt = StatusFormatter(color=True)
    err = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)
    info = logging.LogRecord("x", logging.INFO, __file__, 1, "fine", None, None)
    assert fmt.format(err).startswith("\033[31m")
    assert "\033[" not in fmt.format(info)


def test_reset_logs_removes_both(tmp_path: Path):
    session = tmp_path / "init.log"
    transcript = tmp_path / "terminal_session.log"
    session.write_text("old\n")
    transcript.write_text("old\n")

    removed = reset_logs(str(session), str(transcript))

    assert removed == [str(session), str(transcript)]
    assert not session.exists() and not transcript.exists()
    assert reset_logs(str(session), str(transcript)) == []
