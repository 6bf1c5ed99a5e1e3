from pathlib import Path

from macbootstrap.lib.shellrc import ensure_line_present, parse_env0

LINE = 'eval "$(/Users/alice/homebrew/bin/brew shellenv)"'


def test_line_added_once(tmp_path: Path):
    rc = tmp_path / ".zshenv"

    assert ensure_line_present(str(rc), LINE) is True
    assert ensure_line_present(str(rc), LINE) is False

    assert rc.read_text().splitlines().count(LINE) == 1


def test_appends_after_unterminated_last_line(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("export A=1")

    ensure_line_present(str(rc), LINE)

    assert rc.read_text() == f"export A=1\n{LINE}\n"


def test_partial_match_is_not_presence(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text(f"# {LINE}\n")

    assert ensure_line_present(str(rc), LINE) is True


def test_dry_run_leaves_file_alone(tmp_path: Path):
    rc = tmp_path / "nested" / ".zshenv"
    assert ensure_line_present(str(rc), LINE, dry_run=True) is True
    assert not rc.exists()


def test_parse_env0():
    blob = "HOME=/Users/alice\0PATH=/a:/b\0MULTI=x=y\0\0"
    assert parse_env0(blob) == {"HOME": "/Users/alice", "PATH": "/a:/b", "MULTI": "x=y"}


def test_non_utf8_file_is_appended_to(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_bytes(b"# caf\xe9\n")

    assert ensure_line_present(str(rc), LINE) is True
    assert rc.read_bytes() == b"# caf\xe9\n" + LINE.encode() + b"\n"
