from __future__ import annotations

import logging
from typing import List

from ..lib.assets import remove_path
from ..pipeline import RunContext, StepReport
from ..state_store import touch_marker

logger = logging.getLogger(__name__)


def transient_paths(ctx: RunContext) -> List[str]:
    """Artifacts of this run that are removed once it completes (logs excluded)."""

    s = ctx.settings
    paths = [s.target_dir, s.bootstrap_script, s.marker_file, s.homebrew_marker_file]
    if ctx.config_path:
        paths.append(ctx.config_path)
    return paths


class FinalizeStep:
    step_id = "95_finalize"

    def run(self, ctx: RunContext) -> StepReport:
        report = StepReport(step_id=self.step_id)
        logger.info("Done!")
        touch_marker(ctx.settings.marker_file, dry_run=ctx.dry_run)

        if not ctx.cleanup:
            logger.info("Cleanup disabled; leaving checkout, config and markers in place")
            return report

        for p in transient_paths(ctx):
            if remove_path(p, dry_run=ctx.dry_run):
                report.ok.append(p)
        return report
