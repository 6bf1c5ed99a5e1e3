"""
Pytest config: local imports without installation, plus shared fakes.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest


def _add_repo_root_to_path() -> None:
    repo_root = str(Path(__file__).resolve().parent.parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_add_repo_root_to_path()

from macbootstrap.config import DesiredState, Settings  # noqa: E402
from macbootstrap.lib.command import CmdResult  # noqa: E402
from macbootstrap.logging_utils import shutdown_logging  # noqa: E402
from macbootstrap.pipeline import RunContext  # noqa: E402


class FakeRunner:
    """Stands in for run_cmd; records argv and answers via ``handler``."""

    def __init__(self, handler: Optional[Callable[[List[str]], Tuple[int, str]]] = None):
        self.calls: List[List[str]] = []
        self.handler = handler or (lambda argv: (0, ""))

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False):
        argv_list = [str(a) for a in argv]
        self.calls.append(argv_list)
        rc, out = self.handler(argv_list)
        return CmdResult(argv=argv_list, returncode=rc, stdout=out, stderr="")

    def calls_with(self, *words: str) -> List[List[str]]:
        return [c for c in self.calls if all(w in c for w in words)]


def make_ctx(home: Path, *, settings: Optional[dict] = None, **desired_fields) -> RunContext:
    values = {"target_dir": str(home / "init")}
    values.update(settings or {})
    desired = DesiredState(settings=Settings(values=values, home=str(home)), **desired_fields)
    return RunContext(desired=desired)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    shutdown_logging()
