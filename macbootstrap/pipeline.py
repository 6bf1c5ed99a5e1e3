from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .config import DesiredState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Everything a step may read. Built once per run, never mutated."""

    desired: DesiredState
    dry_run: bool = False
    gui: bool = True
    cleanup: bool = True
    config_path: Optional[str] = None

    @property
    def settings(self):
        return self.desired.settings


@dataclass
class StepReport:
    """Per-item outcomes of a batch step. Failures here are recoverable."""

    step_id: str
    ok: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return f"{self.step_id}: ok={len(self.ok)} failed={len(self.failed)} skipped={len(self.skipped)}"


class Step(Protocol):
    """A single rerun-safe step."""

    step_id: str

    def run(self, ctx: RunContext) -> Optional[StepReport]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    reports: List[StepReport]

    @property
    def failed_items(self) -> List[str]:
        return [f"{r.step_id}:{item}" for r in self.reports for item in r.failed]


def run_pipeline(
    *,
    ctx: RunContext,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in their fixed order.

    A step raising ProvisionError ends the run; per-item failures are
    carried in the returned reports.
    """

    known = {s.step_id for s in steps}
    for name, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in known:
            raise ValueError(f"Unknown step for {name}: {value}")

    ran: List[str] = []
    reports: List[StepReport] = []

    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        logger.info("Running step %s", step.step_id)
        report = step.run(ctx)
        ran.append(step.step_id)
        if report is not None:
            reports.append(report)
            logger.info("Step %s", report.summary())

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    return PipelineResult(ran_steps=ran, reports=reports)
