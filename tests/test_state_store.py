from datetime import date
from pathlib import Path

from macbootstrap.state_store import read_marker, touch_marker


def test_marker_written_once_per_day(tmp_path: Path):
    marker = tmp_path / ".marker"
    today = date(2024, 9, 10)

    assert touch_marker(str(marker), today=today) is True
    assert marker.read_text() == "2024-09-10\n"
    assert touch_marker(str(marker), today=today) is False
    assert read_marker(str(marker)) == "2024-09-10"


def test_marker_overwritten_on_new_day(tmp_path: Path):
    marker = tmp_path / ".marker"
    marker.write_text("2024-09-09\n")

    assert touch_marker(str(marker), today=date(2024, 9, 10)) is True
    assert read_marker(str(marker)) == "2024-09-10"


def test_dry_run_does_not_write(tmp_path: Path):
    marker = tmp_path / ".marker"
    assert touch_marker(str(marker), today=date(2024, 9, 10), dry_run=True) is True
    assert not marker.exists()
    assert read_marker(str(marker)) is None
